"""
Tests for DynamoDB helpers.
"""
import pytest
from decimal import Decimal
from unittest.mock import Mock

from boto3.dynamodb.conditions import Key

from cycle_tracker.utils import dynamo
from cycle_tracker.utils.dynamo import (
    DynamoDBClient,
    create_entry_sk,
    create_key,
    from_dynamo,
    get_dynamo,
    to_dynamo
)


def test_create_key():
    assert create_key("42", "PROFILE") == {"PK": "USER#42", "SK": "PROFILE"}


def test_to_dynamo_converts_floats():
    value = to_dynamo({"bbt": 36.6, "water": 1500, "tags": ["a"], "nested": {"x": 0.5}})
    assert value == {
        "bbt": Decimal("36.6"),
        "water": 1500,
        "tags": ["a"],
        "nested": {"x": Decimal("0.5")}
    }


def test_from_dynamo_restores_numbers():
    value = from_dynamo({"a": Decimal("36.6"), "b": Decimal("28"), "c": [Decimal("1.0")], "d": "x"})
    assert value == {"a": 36.6, "b": 28, "c": [1], "d": "x"}
    assert isinstance(value["b"], int)


def test_get_dynamo_requires_table_name(monkeypatch):
    monkeypatch.setattr(dynamo, "_dynamo_instance", None)
    monkeypatch.delenv("TRACKER_TABLE_NAME", raising=False)

    with pytest.raises(EnvironmentError, match="TRACKER_TABLE_NAME"):
        get_dynamo()


def test_create_entry_sk():
    assert create_entry_sk("2024-03-09") == "ENTRY#2024-03-09"


def test_query_items_reads_every_page():
    """Test query_items follows LastEvaluatedKey across pages."""
    client = DynamoDBClient.__new__(DynamoDBClient)
    client.table = Mock()
    client.table.query.side_effect = [
        {"Items": [{"SK": "ENTRY#2024-03-01"}], "LastEvaluatedKey": {"SK": "ENTRY#2024-03-01"}},
        {"Items": [{"SK": "ENTRY#2024-03-02"}]}
    ]

    items = client.query_items("PK", "USER#42", sort_key_condition=Key("SK").begins_with("ENTRY#"))

    assert [item["SK"] for item in items] == ["ENTRY#2024-03-01", "ENTRY#2024-03-02"]
    first_call, second_call = client.table.query.call_args_list
    assert "ExclusiveStartKey" not in first_call.kwargs
    assert second_call.kwargs["ExclusiveStartKey"] == {"SK": "ENTRY#2024-03-01"}
