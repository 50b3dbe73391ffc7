"""DynamoDB implementation of the document store.

Each collection maps to one table named ``{table_prefix}{collection}`` with
``id`` as its partition key. Equality queries use a Global Secondary Index
named ``{field}-index`` when one is configured for the collection and fall
back to a scan otherwise. When the index has a sort key matching the requested
ordering, ordering and the result cap are pushed down into the query.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from qr_menu_service.repositories.document_store import Document, DocumentStore, sort_key

logger = logging.getLogger(__name__)

# Secondary indexes provisioned for each collection
DEFAULT_INDEXES: dict[str, list[str]] = {
    "menus": ["restaurant_id"],
    "menu_views": ["menu_id", "restaurant_id"],
}

# Sort keys of those indexes, by collection and partition field
DEFAULT_INDEX_SORT_KEYS: dict[str, dict[str, str]] = {
    "menu_views": {"menu_id": "timestamp"},
}


def to_dynamodb_value(value: Any) -> Any:
    """Convert Python values to types boto3 accepts (floats become Decimal)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: to_dynamodb_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_dynamodb_value(item) for item in value]
    return value


def from_dynamodb_value(value: Any) -> Any:
    """Convert boto3 values back to plain Python (Decimal becomes int or float)."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: from_dynamodb_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_dynamodb_value(item) for item in value]
    return value


class DynamoDBDocumentStore(DocumentStore):
    """Document store backed by one DynamoDB table per collection."""

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        table_prefix: str = "qr-menu-",
        indexes: dict[str, list[str]] | None = None,
        index_sort_keys: dict[str, dict[str, str]] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_prefix: Prefix prepended to collection names to form table names
            indexes: Collection name to list of fields with a ``{field}-index`` GSI
            index_sort_keys: Collection name to {partition field: sort key} for those GSIs
        """
        self.dynamodb = dynamodb_resource
        self.table_prefix = table_prefix
        self.indexes = DEFAULT_INDEXES if indexes is None else indexes
        self.index_sort_keys = DEFAULT_INDEX_SORT_KEYS if index_sort_keys is None else index_sort_keys
        self._tables: dict[str, Table] = {}

    def table_for(self, collection: str) -> Table:
        """Return (and cache) the table backing a collection."""
        if collection not in self._tables:
            self._tables[collection] = self.dynamodb.Table(f"{self.table_prefix}{collection}")
        return self._tables[collection]

    def get_document(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        try:
            response = self.table_for(collection).get_item(Key={"id": doc_id})

            if "Item" not in response:
                return None

            item = from_dynamodb_value(response["Item"])
            item.pop("id", None)
            return item

        except ClientError as e:
            logger.error(f"Failed to get document {collection}/{doc_id}: {e}")  # pragma: no cover
            return None

    def set_document(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> bool:
        table = self.table_for(collection)

        try:
            if not merge:
                table.put_item(Item={**to_dynamodb_value(data), "id": doc_id})
                return True

            fields = {key: value for key, value in data.items() if key != "id"}
            if not fields:
                return True

            names = {f"#f{i}": key for i, key in enumerate(fields)}
            values = {f":v{i}": to_dynamodb_value(value) for i, value in enumerate(fields.values())}
            assignments = ", ".join(f"#f{i} = :v{i}" for i in range(len(fields)))

            table.update_item(
                Key={"id": doc_id},
                UpdateExpression=f"SET {assignments}",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to set document {collection}/{doc_id}: {e}")  # pragma: no cover
            return False

    def add_document(self, collection: str, data: dict[str, Any]) -> str | None:
        doc_id = uuid.uuid4().hex[:20]

        try:
            self.table_for(collection).put_item(
                Item={**to_dynamodb_value(data), "id": doc_id},
                ConditionExpression="attribute_not_exists(id)",
            )
            return doc_id

        except ClientError as e:
            logger.error(f"Failed to add document to {collection}: {e}")  # pragma: no cover
            return None

    def query_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        filters = filters or {}
        table = self.table_for(collection)

        indexed = [name for name in self.indexes.get(collection, []) if name in filters]
        key_field = indexed[0] if indexed else None
        other_filters = {name: value for name, value in filters.items() if name != key_field}

        kwargs: dict[str, Any] = {}
        names: dict[str, str] = {}
        values: dict[str, Any] = {}

        # The index already returns items in order, so the cap can be applied by DynamoDB
        sorted_by_index = (
            key_field is not None
            and order_by is not None
            and self.index_sort_keys.get(collection, {}).get(key_field) == order_by
        )

        if key_field is not None:
            kwargs["IndexName"] = f"{key_field}-index"
            kwargs["KeyConditionExpression"] = "#k = :k"
            names["#k"] = key_field
            values[":k"] = to_dynamodb_value(filters[key_field])

        if sorted_by_index:
            kwargs["ScanIndexForward"] = not descending
            if limit is not None:
                kwargs["Limit"] = limit

        if other_filters:
            conditions = []
            for i, (name, value) in enumerate(other_filters.items()):
                names[f"#f{i}"] = name
                values[f":f{i}"] = to_dynamodb_value(value)
                conditions.append(f"#f{i} = :f{i}")
            kwargs["FilterExpression"] = " AND ".join(conditions)

        if names:
            kwargs["ExpressionAttributeNames"] = names
            kwargs["ExpressionAttributeValues"] = values

        try:
            items: list[dict[str, Any]] = []
            operation = table.query if key_field is not None else table.scan

            while True:
                response = operation(**kwargs)
                items.extend(response.get("Items", []))

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                if sorted_by_index and limit is not None:
                    if len(items) >= limit:
                        break
                    kwargs["Limit"] = limit - len(items)
                kwargs["ExclusiveStartKey"] = last_key

        except ClientError as e:
            logger.error(f"Failed to query {collection}: {e}")  # pragma: no cover
            return []

        documents = []
        for item in items:
            data = from_dynamodb_value(item)
            doc_id = data.pop("id")
            documents.append(Document(id=doc_id, data=data))

        if order_by:
            documents.sort(key=lambda doc: sort_key(doc.data.get(order_by)), reverse=descending)

        if limit is not None:
            documents = documents[:limit]

        return documents

    def increment_field(
        self,
        collection: str,
        doc_id: str,
        field_name: str,
        amount: int = 1,
        extra_fields: dict[str, Any] | None = None,
    ) -> bool:
        names = {"#counter": field_name}
        values: dict[str, Any] = {":amount": amount}
        expression = "ADD #counter :amount"

        if extra_fields:
            assignments = []
            for i, (name, value) in enumerate(extra_fields.items()):
                names[f"#e{i}"] = name
                values[f":e{i}"] = to_dynamodb_value(value)
                assignments.append(f"#e{i} = :e{i}")
            expression += " SET " + ", ".join(assignments)

        try:
            self.table_for(collection).update_item(
                Key={"id": doc_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to increment {field_name} on {collection}/{doc_id}: {e}")  # pragma: no cover
            return False

    def delete_document(self, collection: str, doc_id: str) -> bool:
        try:
            self.table_for(collection).delete_item(Key={"id": doc_id})
            return True

        except ClientError as e:
            logger.error(f"Failed to delete document {collection}/{doc_id}: {e}")  # pragma: no cover
            return False
