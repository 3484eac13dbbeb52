"""
Pytest configuration and shared fixtures.
"""
import copy
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from botocore.exceptions import ClientError

from cycle_tracker.models.cycle import CycleData
from cycle_tracker.models.entry import CycleEntry, FlowLevel
from cycle_tracker.models.prediction import Prediction
from cycle_tracker.models.user import UserProfile
from cycle_tracker.services.storage import EntryStore, PinStore
from cycle_tracker.services.tracker import CycleTracker


class FakeDynamo:
    """In-memory stand-in for DynamoDBClient."""

    def __init__(self):
        self.items: Dict[tuple, Dict[str, Any]] = {}
        self.fail = False
        self.put_calls = 0

    def _check(self, operation: str) -> None:
        if self.fail:
            raise ClientError(
                {"Error": {"Code": "InternalServerError", "Message": "DynamoDB error"}},
                operation
            )

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        self._check("PutItem")
        self.put_calls += 1
        self.items[(item["PK"], item["SK"])] = copy.deepcopy(item)
        return {}

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        self._check("GetItem")
        item = self.items.get((key["PK"], key["SK"]))
        return copy.deepcopy(item) if item else None

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        self._check("DeleteItem")
        self.items.pop((key["PK"], key["SK"]), None)
        return {}

    def query_items(self, partition_key, partition_value, sort_key_condition=None) -> List[Dict[str, Any]]:
        """Support the partition equality plus optional begins_with used by the store."""
        self._check("Query")
        prefix = ""
        if sort_key_condition is not None:
            expression = sort_key_condition.get_expression()
            assert expression["operator"] == "begins_with"
            _, prefix = expression["values"]
        return [
            copy.deepcopy(item)
            for (pk, sk), item in sorted(self.items.items())
            if pk == partition_value and sk.startswith(prefix)
        ]


class FakeSecrets:
    """In-memory stand-in for SSMClient."""

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.fail = False

    def _check(self, operation: str) -> None:
        if self.fail:
            raise ClientError(
                {"Error": {"Code": "InternalServerError", "Message": "SSM error"}},
                operation
            )

    def parameter_name(self, *parts: str) -> str:
        return "/cycle_tracker/" + "/".join(parts)

    def put_secret(self, name: str, value: str) -> None:
        self._check("PutParameter")
        self.values[name] = value

    def get_secret(self, name: str) -> Optional[str]:
        self._check("GetParameter")
        return self.values.get(name)

    def delete_secret(self, name: str) -> None:
        self._check("DeleteParameter")
        self.values.pop(name, None)


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class LambdaContext:
    """Minimal Lambda context for handler tests."""
    function_name: str = "test"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:eu-west-1:123456789012:function:test"
    aws_request_id: str = "da658bd3-2d6f-4e7b-8ec2-937234644fdc"


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-03-10 09:00 UTC."""
    return FakeClock(datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def dynamo() -> FakeDynamo:
    return FakeDynamo()


@pytest.fixture
def secrets() -> FakeSecrets:
    return FakeSecrets()


@pytest.fixture
def pin_store(secrets) -> PinStore:
    return PinStore("123", ssm=secrets)


@pytest.fixture
def store(dynamo, pin_store, clock) -> EntryStore:
    return EntryStore("123", dynamo=dynamo, pin_store=pin_store, clock=clock)


@pytest.fixture
def tracker(store, pin_store, clock) -> CycleTracker:
    return CycleTracker(store, pin_store, clock=clock)


@pytest.fixture
def lambda_context() -> LambdaContext:
    return LambdaContext()


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(name="Test User")


def make_entry(entry_date: date, flow: Optional[str] = None, **fields) -> CycleEntry:
    """Create an entry for a date with optional flow."""
    return CycleEntry(date=entry_date, flow=flow, **fields)


@pytest.fixture
def regular_flow_entries() -> List[CycleEntry]:
    """Three 3-day periods starting 28 days apart, plus non-flow days."""
    entries = []
    for start in (date(2024, 1, 1), date(2024, 1, 29), date(2024, 2, 26)):
        entries.append(make_entry(start, FlowLevel.HEAVY))
        entries.append(make_entry(start + timedelta(days=1), FlowLevel.MEDIUM))
        entries.append(make_entry(start + timedelta(days=2), FlowLevel.LIGHT))
    entries.append(make_entry(date(2024, 1, 10), FlowLevel.NONE, mood="happy"))
    entries.append(make_entry(date(2024, 2, 12), symptoms=["cramps"]))
    return entries


@pytest.fixture
def cycle_data() -> CycleData:
    """Cycle data with enough history to request a prediction."""
    return CycleData(
        last_period_start=date(2024, 2, 26),
        entries=[
            make_entry(date(2024, 2, 27), FlowLevel.MEDIUM),
            make_entry(date(2024, 2, 26), FlowLevel.HEAVY)
        ]
    )


@pytest.fixture
def make_prediction(clock):
    """Factory for predictions generated relative to the fixed clock."""
    def _make(data_hash: str, age: timedelta = timedelta(0), **fields) -> Prediction:
        values = {
            "next_period_date": date(2024, 3, 25),
            "predicted_cycle_length": 28,
            "fertile_window_start": date(2024, 3, 6),
            "fertile_window_end": date(2024, 3, 12),
            "insights": ["Your cycle looks regular"],
            "tips": ["Stay hydrated"],
            "confidence": 80,
            "generated_at": clock() - age,
            "data_hash": data_hash
        }
        values.update(fields)
        return Prediction(**values)
    return _make
