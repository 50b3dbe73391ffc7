"""In-memory document store for developer mode.

Holds ``collection -> {doc_id -> document}`` mappings owned by a single store
object. The store lives as long as the process that created it; nothing is
persisted.
"""

import copy
import logging
import uuid
from typing import Any

from qr_menu_service.repositories.document_store import Document, DocumentStore, sort_key

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Document store backed by plain dictionaries.

    Documents are deep-copied on every read and write so callers can never
    mutate stored state by accident.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self.collections.setdefault(collection, {})

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        logger.debug(f"Getting document {collection}/{doc_id}")
        document = self._collection(collection).get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    def set_document(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> bool:
        logger.debug(f"Setting document {collection}/{doc_id} (merge={merge})")
        documents = self._collection(collection)

        if merge and doc_id in documents:
            documents[doc_id] = {**documents[doc_id], **copy.deepcopy(data)}
        else:
            documents[doc_id] = copy.deepcopy(data)

        return True

    def add_document(self, collection: str, data: dict[str, Any]) -> str | None:
        doc_id = uuid.uuid4().hex[:20]
        logger.debug(f"Adding document {collection}/{doc_id}")
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def query_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        filters = filters or {}
        matches = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(data.get(name) == value for name, value in filters.items())
        ]

        if order_by:
            matches.sort(key=lambda doc: sort_key(doc.data.get(order_by)), reverse=descending)

        if limit is not None:
            matches = matches[:limit]

        return matches

    def increment_field(
        self,
        collection: str,
        doc_id: str,
        field_name: str,
        amount: int = 1,
        extra_fields: dict[str, Any] | None = None,
    ) -> bool:
        document = self._collection(collection).get(doc_id)
        if document is None:
            logger.warning(f"Cannot increment {field_name} on missing document {collection}/{doc_id}")
            return False

        document[field_name] = int(document.get(field_name, 0)) + amount
        if extra_fields:
            document.update(copy.deepcopy(extra_fields))
        return True

    def delete_document(self, collection: str, doc_id: str) -> bool:
        self._collection(collection).pop(doc_id, None)
        return True

    def clear(self) -> None:
        """Drop every collection."""
        self.collections.clear()
