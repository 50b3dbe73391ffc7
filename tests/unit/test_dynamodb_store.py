"""Unit tests for the DynamoDB document store."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from qr_menu_service.repositories.dynamodb_store import (
    DynamoDBDocumentStore,
    from_dynamodb_value,
    to_dynamodb_value,
)


def client_error(operation: str, code: str = "InternalServerError") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Server error"}}, operation)


@pytest.mark.unit
class TestValueConversion:
    """Tests for float/Decimal conversion."""

    def test_floats_become_decimals_recursively(self) -> None:
        converted = to_dynamodb_value({"price": 2.5, "items": [{"price": 1.1}], "flag": True})

        assert converted == {"price": Decimal("2.5"), "items": [{"price": Decimal("1.1")}], "flag": True}

    def test_decimals_become_int_or_float(self) -> None:
        converted = from_dynamodb_value({"count": Decimal("3"), "price": Decimal("2.5")})

        assert converted == {"count": 3, "price": 2.5}
        assert isinstance(converted["count"], int)


@pytest.mark.unit
class TestDynamoDBDocumentStore:
    """Test suite for DynamoDBDocumentStore."""

    @pytest.fixture
    def mock_dynamodb(self) -> MagicMock:
        """Create a mock DynamoDB resource."""
        return MagicMock()

    @pytest.fixture
    def table(self, mock_dynamodb: MagicMock) -> MagicMock:
        return mock_dynamodb.Table.return_value

    @pytest.fixture
    def store(self, mock_dynamodb: MagicMock) -> DynamoDBDocumentStore:
        return DynamoDBDocumentStore(dynamodb_resource=mock_dynamodb, table_prefix="test-")

    def test_tables_are_prefixed_and_cached(
        self, store: DynamoDBDocumentStore, mock_dynamodb: MagicMock
    ) -> None:
        store.table_for("menus")
        store.table_for("menus")

        mock_dynamodb.Table.assert_called_once_with("test-menus")

    def test_get_document_strips_id(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.get_item.return_value = {
            "Item": {"id": "m1", "name": "Lunch", "view_count": Decimal("7")}
        }

        document = store.get_document("menus", "m1")

        table.get_item.assert_called_once_with(Key={"id": "m1"})
        assert document == {"name": "Lunch", "view_count": 7}

    def test_get_document_not_found(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.get_item.return_value = {}

        assert store.get_document("menus", "m1") is None

    def test_get_document_error(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.get_item.side_effect = client_error("GetItem")

        assert store.get_document("menus", "m1") is None

    def test_set_document_puts_whole_item(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        assert store.set_document("menus", "m1", {"name": "Lunch", "price": 1.5}) is True

        table.put_item.assert_called_once_with(
            Item={"name": "Lunch", "price": Decimal("1.5"), "id": "m1"}
        )

    def test_set_document_merge_uses_update(
        self, store: DynamoDBDocumentStore, table: MagicMock
    ) -> None:
        assert store.set_document("menus", "m1", {"name": "Dinner", "updated_at": "t"}, merge=True)

        table.update_item.assert_called_once_with(
            Key={"id": "m1"},
            UpdateExpression="SET #f0 = :v0, #f1 = :v1",
            ExpressionAttributeNames={"#f0": "name", "#f1": "updated_at"},
            ExpressionAttributeValues={":v0": "Dinner", ":v1": "t"},
        )
        table.put_item.assert_not_called()

    def test_set_document_error(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.put_item.side_effect = client_error("PutItem")

        assert store.set_document("menus", "m1", {"name": "Lunch"}) is False

    def test_add_document_is_conditional(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        doc_id = store.add_document("menus", {"name": "Lunch"})

        assert doc_id is not None
        table.put_item.assert_called_once_with(
            Item={"name": "Lunch", "id": doc_id},
            ConditionExpression="attribute_not_exists(id)",
        )

    def test_add_document_error(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.put_item.side_effect = client_error("PutItem", "ConditionalCheckFailedException")

        assert store.add_document("menus", {"name": "Lunch"}) is None

    def test_query_uses_index_and_filter(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.query.return_value = {
            "Items": [
                {"id": "e1", "menu_id": "m1", "timestamp": "2024-01-01T00:00:00+00:00"},
                {"id": "e2", "menu_id": "m1", "timestamp": "2024-01-02T00:00:00+00:00"},
            ]
        }

        documents = store.query_documents(
            "menu_views",
            filters={"menu_id": "m1", "restaurant_id": "v1"},
            order_by="timestamp",
            descending=True,
            limit=1,
        )

        table.query.assert_called_once_with(
            IndexName="menu_id-index",
            KeyConditionExpression="#k = :k",
            FilterExpression="#f0 = :f0",
            ExpressionAttributeNames={"#k": "menu_id", "#f0": "restaurant_id"},
            ExpressionAttributeValues={":k": "m1", ":f0": "v1"},
            ScanIndexForward=False,
            Limit=1,
        )
        assert [doc.id for doc in documents] == ["e2"]
        assert "id" not in documents[0].data

    def test_query_follows_pagination(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.query.side_effect = [
            {"Items": [{"id": "m1", "restaurant_id": "v1"}], "LastEvaluatedKey": {"id": "m1"}},
            {"Items": [{"id": "m2", "restaurant_id": "v1"}]},
        ]

        documents = store.query_documents("menus", filters={"restaurant_id": "v1"})

        assert [doc.id for doc in documents] == ["m1", "m2"]
        assert table.query.call_args_list[1].kwargs["ExclusiveStartKey"] == {"id": "m1"}

    def test_sorted_index_query_stops_at_limit(
        self, store: DynamoDBDocumentStore, table: MagicMock
    ) -> None:
        """Test that a capped query on the timestamp index reads one page only."""
        pages = [
            {
                "Items": [
                    {
                        "id": f"e{page}{n}",
                        "menu_id": "m1",
                        "timestamp": f"2024-01-{20 - page:02d}T{9 - n:02d}:00:00+00:00",
                    }
                    for n in range(5)
                ],
                "LastEvaluatedKey": {"id": f"e{page}4"},
            }
            for page in range(10)
        ]
        table.query.side_effect = pages

        documents = store.query_documents(
            "menu_views", filters={"menu_id": "m1"}, order_by="timestamp", descending=True, limit=3
        )

        assert table.query.call_count == 1
        call_kwargs = table.query.call_args.kwargs
        assert call_kwargs["Limit"] == 3
        assert call_kwargs["ScanIndexForward"] is False
        assert [doc.id for doc in documents] == ["e00", "e01", "e02"]

    def test_sorted_index_query_pages_until_limit(
        self, store: DynamoDBDocumentStore, table: MagicMock
    ) -> None:
        """Test that filtered-out items make the store fetch only the remainder."""
        table.query.side_effect = [
            {
                "Items": [{"id": "e1", "menu_id": "m1", "timestamp": "2024-01-02T00:00:00+00:00"}],
                "LastEvaluatedKey": {"id": "e1"},
            },
            {
                "Items": [{"id": "e2", "menu_id": "m1", "timestamp": "2024-01-01T00:00:00+00:00"}],
                "LastEvaluatedKey": {"id": "e2"},
            },
        ]

        documents = store.query_documents(
            "menu_views",
            filters={"menu_id": "m1", "restaurant_id": "v1"},
            order_by="timestamp",
            descending=True,
            limit=2,
        )

        assert table.query.call_count == 2
        assert table.query.call_args_list[1].kwargs["Limit"] == 1
        assert [doc.id for doc in documents] == ["e1", "e2"]

    def test_query_without_index_scans(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.scan.return_value = {"Items": [{"id": "u1", "email": "a@example.com"}]}

        documents = store.query_documents("users", filters={"email": "a@example.com"})

        table.query.assert_not_called()
        table.scan.assert_called_once_with(
            FilterExpression="#f0 = :f0",
            ExpressionAttributeNames={"#f0": "email"},
            ExpressionAttributeValues={":f0": "a@example.com"},
        )
        assert documents[0].data == {"email": "a@example.com"}

    def test_query_error_returns_empty(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.query.side_effect = client_error("Query")

        assert store.query_documents("menus", filters={"restaurant_id": "v1"}) == []

    def test_increment_field(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        assert store.increment_field(
            "menus", "m1", "view_count", extra_fields={"last_viewed": "2024-01-01T00:00:00+00:00"}
        )

        table.update_item.assert_called_once_with(
            Key={"id": "m1"},
            UpdateExpression="ADD #counter :amount SET #e0 = :e0",
            ConditionExpression="attribute_exists(id)",
            ExpressionAttributeNames={"#counter": "view_count", "#e0": "last_viewed"},
            ExpressionAttributeValues={":amount": 1, ":e0": "2024-01-01T00:00:00+00:00"},
        )

    def test_increment_missing_document(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.update_item.side_effect = client_error("UpdateItem", "ConditionalCheckFailedException")

        assert store.increment_field("menus", "ghost", "view_count") is False

    def test_delete_document(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        assert store.delete_document("sessions", "t1") is True
        table.delete_item.assert_called_once_with(Key={"id": "t1"})

    def test_delete_document_error(self, store: DynamoDBDocumentStore, table: MagicMock) -> None:
        table.delete_item.side_effect = client_error("DeleteItem")

        assert store.delete_document("sessions", "t1") is False
