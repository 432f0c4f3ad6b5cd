"""
DynamoDB-backed document store for deployments sharing one credential record.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from luckydraw.core.config import StoreSettings


class DynamoDBClient:
    """Same document operations as ``SQLiteStore`` over a (pk, sk) table."""

    def __init__(self, settings: StoreSettings, table: Any = None) -> None:
        self._settings = settings
        if table is None:
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    def put_item(self, item: Dict[str, Any]) -> None:
        """Put an item in the DynamoDB table."""
        self._table.put_item(Item=item)

    def put_item_if_absent(self, item: Dict[str, Any]) -> bool:
        """Conditionally put an item; ``False`` when the key is already taken."""
        try:
            self._table.put_item(
                Item=item, ConditionExpression="attribute_not_exists(pk)"
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return False
            raise
        return True

    def get_item(
        self, *, partition_key: str, sort_key: str
    ) -> Optional[Dict[str, Any]]:
        """Retrieve an item using its key."""
        response = self._table.get_item(Key={"pk": partition_key, "sk": sort_key})
        return response.get("Item")

    def query_items(self, *, partition_key: str) -> list[Dict[str, Any]]:
        """Query items that share the same partition key."""
        items: list[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": Key("pk").eq(partition_key)
        }
        while True:
            response = self._table.query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def count_items(self, *, partition_key: str) -> int:
        total = 0
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": Key("pk").eq(partition_key),
            "Select": "COUNT",
        }
        while True:
            response = self._table.query(**kwargs)
            total += int(response.get("Count", 0))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return total
            kwargs["ExclusiveStartKey"] = last_key


__all__ = ["DynamoDBClient"]
