"""
Persistence services for cycle data, profile, prediction cache and PIN.

All of a user's records live in the tracker table under the USER#{user_id}
partition, one item per record. Each logged day is its own ENTRY#{date} item
so the history can grow without hitting the item size limit. The PIN is kept
apart in SSM Parameter Store.

Read and write failures never raise: getters fall back to defaults or None,
writers return False. Callers must check the result before assuming the
state changed.

Typical usage:
    store = EntryStore(user_id)
    if store.upsert_entry(entry):
        cycle_data = store.get_cycle_data()
"""
import hmac
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from cycle_tracker.models.cycle import CycleData
from cycle_tracker.models.entry import CycleEntry, utc_now
from cycle_tracker.models.prediction import Prediction
from cycle_tracker.models.user import UserProfile
from cycle_tracker.utils.dynamo import (
    get_dynamo,
    create_entry_sk,
    create_key,
    create_pk,
    to_dynamo,
    from_dynamo,
    PROFILE_SK,
    CYCLE_DATA_SK,
    ONBOARDING_SK,
    PREDICTION_SK,
    USER_RECORD_SKS,
    ENTRY_SK_PREFIX
)
from cycle_tracker.utils.ssm import get_ssm

logger = Logger()

STORAGE_ERRORS = (ClientError, BotoCoreError)


class StorageReadError(Exception):
    """Raised internally when a stored record cannot be read or decoded."""
    pass


class PinStore:
    """Secure storage for the app lock PIN."""

    def __init__(self, user_id: str, ssm=None):
        """
        Initialize PIN store.

        Args:
            user_id: Owner of the PIN
            ssm: Optional SSM client, defaults to the shared instance
        """
        self.user_id = user_id
        self._ssm = ssm

    @property
    def ssm(self):
        """Get the SSM client lazily."""
        if self._ssm is None:
            self._ssm = get_ssm()
        return self._ssm

    @property
    def parameter_name(self) -> str:
        return self.ssm.parameter_name(self.user_id, "pin")

    def set_pin(self, pin: str) -> bool:
        """Store or replace the PIN."""
        try:
            self.ssm.put_secret(self.parameter_name, pin)
            return True
        except STORAGE_ERRORS as e:
            logger.error("Error storing PIN", extra={
                "user_id": self.user_id,
                "error_type": e.__class__.__name__
            })
            return False

    def has_pin(self) -> bool:
        """Check whether a PIN has been set."""
        try:
            return self.ssm.get_secret(self.parameter_name) is not None
        except STORAGE_ERRORS as e:
            logger.error("Error reading PIN", extra={
                "user_id": self.user_id,
                "error_type": e.__class__.__name__
            })
            return False

    def verify_pin(self, pin: str) -> bool:
        """
        Compare a candidate PIN with the stored one.

        Returns:
            True only if a PIN is stored and matches
        """
        try:
            stored = self.ssm.get_secret(self.parameter_name)
        except STORAGE_ERRORS as e:
            logger.error("Error reading PIN", extra={
                "user_id": self.user_id,
                "error_type": e.__class__.__name__
            })
            return False
        if stored is None:
            return False
        return hmac.compare_digest(stored.encode(), pin.encode())

    def clear_pin(self) -> bool:
        """Remove the stored PIN."""
        try:
            self.ssm.delete_secret(self.parameter_name)
            return True
        except STORAGE_ERRORS as e:
            logger.error("Error clearing PIN", extra={
                "user_id": self.user_id,
                "error_type": e.__class__.__name__
            })
            return False


class EntryStore:
    """Key-value store for a single user's tracker records."""

    def __init__(
        self,
        user_id: str,
        dynamo=None,
        pin_store: Optional[PinStore] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize entry store.

        Args:
            user_id: Owner of the records
            dynamo: Optional DynamoDB client, defaults to the shared instance
            pin_store: Optional PIN store wiped together with the other records
            clock: Source of the current time for entry timestamps
        """
        self.user_id = user_id
        self._dynamo = dynamo
        self.pin_store = pin_store
        self.clock = clock

    @property
    def dynamo(self):
        """Get the DynamoDB client lazily."""
        if self._dynamo is None:
            self._dynamo = get_dynamo()
        return self._dynamo

    def _read(self, sort_key: str) -> Optional[Any]:
        try:
            item = self.dynamo.get_item(create_key(self.user_id, sort_key))
        except STORAGE_ERRORS as e:
            logger.error("Error reading record", extra={
                "user_id": self.user_id,
                "record": sort_key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise StorageReadError(f"Failed to read {sort_key}: {str(e)}") from e

        if not item:
            return None
        return from_dynamo(item.get("data"))

    def _write(self, sort_key: str, data: Any) -> bool:
        try:
            self.dynamo.put_item({
                **create_key(self.user_id, sort_key),
                "data": to_dynamo(data),
                "saved_at": self.clock().isoformat()
            })
            return True
        except STORAGE_ERRORS as e:
            logger.error("Error writing record", extra={
                "user_id": self.user_id,
                "record": sort_key,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return False

    def _load_settings(self) -> CycleData:
        data = self._read(CYCLE_DATA_SK)
        if data is None:
            return CycleData()
        try:
            return CycleData.model_validate({**data, "entries": []})
        except ValidationError as e:
            logger.error("Stored cycle data is invalid", extra={
                "user_id": self.user_id,
                "error": str(e)
            })
            raise StorageReadError("Stored cycle data is invalid") from e

    def _query_entry_items(self) -> List[Dict[str, Any]]:
        try:
            return self.dynamo.query_items(
                partition_key="PK",
                partition_value=create_pk(self.user_id),
                sort_key_condition=Key('SK').begins_with(ENTRY_SK_PREFIX)
            )
        except STORAGE_ERRORS as e:
            logger.error("Error querying entries", extra={
                "user_id": self.user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise StorageReadError(f"Failed to query entries: {str(e)}") from e

    def _parse_entry(self, data: Any) -> Optional[CycleEntry]:
        try:
            return CycleEntry.model_validate(data)
        except ValidationError as e:
            logger.warning("Skipping invalid stored entry", extra={
                "user_id": self.user_id,
                "error": str(e)
            })
            return None

    def _load_entries(self) -> List[CycleEntry]:
        entries = []
        for item in self._query_entry_items():
            entry = self._parse_entry(from_dynamo(item.get("data")))
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    def get_cycle_data(self) -> CycleData:
        """
        Get the user's cycle settings together with every logged entry.

        Returns:
            Stored CycleData with entries newest first, or defaults if it
            cannot be read
        """
        try:
            settings = self._load_settings()
            entries = self._load_entries()
        except StorageReadError:
            return CycleData()
        return settings.model_copy(update={"entries": entries})

    def save_cycle_data(self, cycle_data: CycleData) -> bool:
        """
        Replace the stored cycle settings.

        Entries are stored one item per date by upsert_entry and are not
        written here.
        """
        return self._write(
            CYCLE_DATA_SK,
            cycle_data.model_dump(mode="json", exclude={"entries"})
        )

    def upsert_entry(self, entry: CycleEntry) -> bool:
        """
        Insert an entry or merge it into the existing entry for the same date.

        The stored entry keeps the original id and created_at; every other field
        takes the new value and updated_at is refreshed.

        Args:
            entry: Entry to store

        Returns:
            True if the entry was written
        """
        sort_key = create_entry_sk(entry.date.isoformat())
        try:
            data = self._read(sort_key)
        except StorageReadError:
            return False

        now = self.clock()
        existing = self._parse_entry(data) if data is not None else None
        if existing is not None:
            stored = entry.model_copy(update={
                "id": existing.id,
                "created_at": existing.created_at,
                "updated_at": now
            })
            logger.info("Updating existing entry", extra={
                "user_id": self.user_id,
                "date": entry.date.isoformat()
            })
        else:
            stored = entry.model_copy(update={
                "created_at": now,
                "updated_at": now
            })
        return self._write(sort_key, stored.model_dump(mode="json"))

    def get_entry_by_date(self, entry_date: date) -> Optional[CycleEntry]:
        """Get the entry logged for a date, or None."""
        try:
            data = self._read(create_entry_sk(entry_date.isoformat()))
        except StorageReadError:
            return None
        if data is None:
            return None
        return self._parse_entry(data)

    def update_cycle_settings(self, **changes: Any) -> bool:
        """
        Apply field changes to the stored cycle settings in one write.

        Returns:
            True if the settings were written, False if they could not be read

        Raises:
            ValidationError: If the changed settings are invalid
        """
        try:
            settings = self._load_settings()
        except StorageReadError:
            return False
        updated = CycleData.model_validate({**settings.model_dump(), **changes})
        return self.save_cycle_data(updated)

    def set_last_period_start(self, start_date: date) -> bool:
        """Set or correct the anchor date for cycle calculations."""
        return self.update_cycle_settings(last_period_start=start_date)

    def get_user_profile(self) -> UserProfile:
        """
        Get the user's profile.

        Returns:
            Stored UserProfile, or defaults if none is stored or it cannot be read
        """
        try:
            data = self._read(PROFILE_SK)
        except StorageReadError:
            return UserProfile()
        if data is None:
            return UserProfile()
        try:
            return UserProfile.model_validate(data)
        except ValidationError as e:
            logger.error("Stored profile is invalid", extra={
                "user_id": self.user_id,
                "error": str(e)
            })
            return UserProfile()

    def save_user_profile(self, profile: UserProfile) -> bool:
        """Replace the stored profile."""
        return self._write(PROFILE_SK, profile.model_dump(mode="json"))

    def update_user_profile(self, **changes: Any) -> bool:
        """
        Apply field changes to the stored profile.

        Raises:
            ValidationError: If the changed profile is invalid
        """
        current = self.get_user_profile()
        updated = UserProfile.model_validate({**current.model_dump(), **changes})
        return self.save_user_profile(updated)

    def is_onboarding_complete(self) -> bool:
        """Check if onboarding has been completed."""
        try:
            return bool(self._read(ONBOARDING_SK))
        except StorageReadError:
            return False

    def set_onboarding_complete(self, complete: bool = True) -> bool:
        """Record whether onboarding has been completed."""
        return self._write(ONBOARDING_SK, complete)

    def get_cached_prediction(self) -> Optional[Prediction]:
        """
        Get the cached prediction.

        Returns:
            Cached Prediction, or None if absent or unreadable
        """
        try:
            data = self._read(PREDICTION_SK)
        except StorageReadError:
            return None
        if data is None:
            return None
        try:
            return Prediction.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding invalid cached prediction", extra={
                "user_id": self.user_id,
                "error": str(e)
            })
            return None

    def set_cached_prediction(self, prediction: Prediction) -> bool:
        """Replace the cached prediction."""
        return self._write(PREDICTION_SK, prediction.model_dump(mode="json"))

    def clear_all(self) -> bool:
        """
        Delete every record of the user, including the PIN.

        This cannot be undone.

        Returns:
            True if every record was deleted
        """
        try:
            entry_keys = [item["SK"] for item in self._query_entry_items()]
        except StorageReadError:
            return False

        try:
            for sort_key in (*USER_RECORD_SKS, *entry_keys):
                self.dynamo.delete_item(create_key(self.user_id, sort_key))
        except STORAGE_ERRORS as e:
            logger.error("Error clearing user data", extra={
                "user_id": self.user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            return False

        if self.pin_store is not None and not self.pin_store.clear_pin():
            return False

        logger.info("Cleared all user data", extra={"user_id": self.user_id})
        return True

