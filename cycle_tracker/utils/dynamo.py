"""
DynamoDB utility functions for data access.
"""
import json
import os
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key

# Singleton instance
_dynamo_instance = None

PROFILE_SK = "PROFILE"
CYCLE_DATA_SK = "CYCLE_DATA"
ONBOARDING_SK = "ONBOARDING"
PREDICTION_SK = "PREDICTION"

USER_RECORD_SKS = (PROFILE_SK, CYCLE_DATA_SK, ONBOARDING_SK, PREDICTION_SK)

ENTRY_SK_PREFIX = "ENTRY#"


def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If TRACKER_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['TRACKER_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "TRACKER_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance


class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes

        Returns:
            Response from DynamoDB
        """
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None
    ) -> List[Dict[str, Any]]:
        """
        Query items using partition key and optional sort key condition.

        Follows LastEvaluatedKey until every page has been read.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition

        Returns:
            List of matching items
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition:
            key_condition = key_condition & sort_key_condition

        query_args = {"KeyConditionExpression": key_condition}
        items = []
        while True:
            response = self.table.query(**query_args)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            query_args["ExclusiveStartKey"] = last_key


def create_pk(user_id: str) -> str:
    """Create partition key from user ID."""
    return f"USER#{user_id}"


def create_entry_sk(date_str: str) -> str:
    """Create sort key for the entry logged on a date."""
    return f"{ENTRY_SK_PREFIX}{date_str}"


def create_key(user_id: str, sort_key: str) -> Dict[str, str]:
    """Create the full primary key for one of a user's records."""
    return {"PK": create_pk(user_id), "SK": sort_key}


def to_dynamo(value: Any) -> Any:
    """
    Convert JSON-compatible data into DynamoDB attribute values.

    boto3 rejects Python floats, so every float becomes a Decimal.
    """
    return json.loads(json.dumps(value), parse_float=Decimal)


def from_dynamo(value: Any) -> Any:
    """
    Convert DynamoDB attribute values back into plain Python data.

    Decimals come back as int when they are whole numbers, float otherwise.
    """
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value
