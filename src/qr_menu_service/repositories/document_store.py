"""Document store interface.

The rest of the service talks to the backing store only through this
interface. Exactly one implementation is selected at process start: DynamoDB
for deployed environments, the in-memory store for developer mode.

Expected failures are reported through return values (None/False/empty list)
and logged by the implementation, rather than raised.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Document:
    """A stored document and its identifier."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """Narrow CRUD interface over named document collections."""

    @abstractmethod
    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch a document.

        Args:
            collection: Collection name (e.g. 'menus')
            doc_id: Document identifier

        Returns:
            The document data, or None if it does not exist or the read failed
        """
        pass

    @abstractmethod
    def set_document(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> bool:
        """Write a document.

        Without ``merge`` the whole document is replaced. With ``merge`` the
        top-level fields of ``data`` are overlaid on the existing document,
        which is created if missing.

        Returns:
            bool: True if the write succeeded, False otherwise
        """
        pass

    @abstractmethod
    def add_document(self, collection: str, data: dict[str, Any]) -> str | None:
        """Create a document with a generated identifier.

        Returns:
            The new document id, or None if the write failed
        """
        pass

    @abstractmethod
    def query_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """Query a collection with equality filters.

        Args:
            collection: Collection name
            filters: Field/value pairs that must all match
            order_by: Optional field to sort on (documents missing it sort first)
            descending: Sort direction when ``order_by`` is given
            limit: Optional cap on the number of documents returned

        Returns:
            list: Matching documents (empty list if none or on failure)
        """
        pass

    @abstractmethod
    def increment_field(
        self,
        collection: str,
        doc_id: str,
        field_name: str,
        amount: int = 1,
        extra_fields: dict[str, Any] | None = None,
    ) -> bool:
        """Atomically increment a numeric field of an existing document.

        Args:
            collection: Collection name
            doc_id: Document identifier
            field_name: Numeric field to increment (missing counts as 0)
            amount: Increment amount
            extra_fields: Other fields to set in the same write

        Returns:
            bool: True if updated, False if the document is missing or the write failed
        """
        pass

    @abstractmethod
    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document.

        Returns:
            bool: True if the delete succeeded (or nothing existed), False on failure
        """
        pass


def sort_key(value: Any) -> tuple[int, Any]:
    """Sort key that places missing values first and compares the rest."""
    if value is None:
        return (0, "")
    return (1, value)
