"""
Cycle tracker service.

This module ties the entry store to the cycle calculations. Input is validated
here, before anything is written, and every read recomputes the derived
status and statistics from the stored data.

Typical usage:
    tracker = CycleTracker(EntryStore(user_id), PinStore(user_id))
    tracker.log_entry(date=date.today(), flow="medium", symptoms=["cramps"])
    status = tracker.get_status()
"""
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from cycle_tracker.models.cycle import CycleData, CycleStats, CycleStatus
from cycle_tracker.models.entry import CycleEntry, utc_now
from cycle_tracker.services.constants import PIN_LENGTH
from cycle_tracker.services.cycle import (
    calculate_cycle_status,
    calculate_fertility_level,
    calculate_next_period_date,
    calculate_pregnancy_week
)
from cycle_tracker.services.exceptions import EntryValidationError, SettingsValidationError
from cycle_tracker.services.history import filter_entries, get_period_history
from cycle_tracker.services.statistics import calculate_cycle_statistics

logger = Logger()

PIN_PATTERN = re.compile(rf"\d{{{PIN_LENGTH}}}")


def format_validation_error(error: ValidationError) -> str:
    """
    Format a pydantic validation error as a single readable line.
    """
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        messages.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(messages)


class CycleTracker:
    """Service for logging days and reading derived cycle state."""

    def __init__(self, store, pin_store=None, clock: Callable[[], datetime] = utc_now):
        """
        Initialize cycle tracker.

        Args:
            store: EntryStore for the user
            pin_store: Optional PinStore for the app lock
            clock: Source of the current time
        """
        self.store = store
        self.pin_store = pin_store
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    def get_cycle_data(self) -> CycleData:
        return self.store.get_cycle_data()

    def get_status(self, cycle_data: Optional[CycleData] = None) -> CycleStatus:
        """Get the current cycle status, reading cycle data if not given."""
        if cycle_data is None:
            cycle_data = self.get_cycle_data()
        return calculate_cycle_status(cycle_data, self.today())

    def get_stats(self, cycle_data: Optional[CycleData] = None) -> CycleStats:
        """Get cycle length statistics, reading cycle data if not given."""
        if cycle_data is None:
            cycle_data = self.get_cycle_data()
        return calculate_cycle_statistics(cycle_data.entries, cycle_data.cycle_length)

    def get_overview(self, cycle_data: Optional[CycleData] = None) -> Dict[str, Any]:
        """
        Get everything the home view shows, computed from one read.

        Returns:
            Dictionary containing:
            - status: Current CycleStatus
            - fertility: FertilityLevel for today
            - stats: CycleStats
            - next_period_date: Expected next period start or None
            - pregnancy_week: Weeks since the last period start
        """
        if cycle_data is None:
            cycle_data = self.get_cycle_data()
        today = self.today()
        status = calculate_cycle_status(cycle_data, today)
        return {
            "status": status,
            "fertility": calculate_fertility_level(status),
            "stats": calculate_cycle_statistics(cycle_data.entries, cycle_data.cycle_length),
            "next_period_date": calculate_next_period_date(cycle_data, today),
            "pregnancy_week": calculate_pregnancy_week(cycle_data.last_period_start, today)
        }

    def log_entry(self, **fields: Any) -> Optional[CycleEntry]:
        """
        Validate and store the observations for one day.

        Logging the same date twice updates that day's entry.

        Args:
            **fields: CycleEntry fields, date is required

        Returns:
            The stored entry, or None if it could not be written

        Raises:
            EntryValidationError: If any field is invalid. Nothing is written.
        """
        try:
            entry = CycleEntry(**fields)
        except ValidationError as e:
            message = format_validation_error(e)
            logger.warning("Rejected invalid entry", extra={"error": message})
            raise EntryValidationError(message)

        if not self.store.upsert_entry(entry):
            logger.error("Failed to store entry", extra={"date": entry.date.isoformat()})
            return None
        return self.store.get_entry_by_date(entry.date)

    def get_entry(self, entry_date: date) -> Optional[CycleEntry]:
        return self.store.get_entry_by_date(entry_date)

    def get_history(self, filter_name: str = "all") -> List[CycleEntry]:
        """
        Get logged days for the history view.

        Raises:
            EntryValidationError: If the filter name is unknown
        """
        try:
            return filter_entries(self.get_cycle_data().entries, filter_name)
        except ValueError as e:
            raise EntryValidationError(str(e))

    def get_period_history(self, periods: Optional[int] = None) -> List[Dict[str, Any]]:
        return get_period_history(self.get_cycle_data().entries, periods=periods)

    def update_cycle(
        self,
        last_period_start: Optional[date] = None,
        cycle_length: Optional[int] = None,
        period_length: Optional[int] = None
    ) -> bool:
        """
        Change any of the cycle settings together.

        Every change is checked before anything is written, and the settings
        record is saved once.

        Raises:
            SettingsValidationError: If the start date is in the future or
                the lengths are out of bounds
        """
        changes = {}
        if last_period_start is not None:
            if last_period_start > self.today():
                raise SettingsValidationError("last_period_start: Date cannot be in the future")
            changes["last_period_start"] = last_period_start
        if cycle_length is not None:
            changes["cycle_length"] = cycle_length
        if period_length is not None:
            changes["period_length"] = period_length
        if not changes:
            return True

        try:
            return self.store.update_cycle_settings(**changes)
        except ValidationError as e:
            raise SettingsValidationError(format_validation_error(e))

    def set_last_period_start(self, start_date: date) -> bool:
        """
        Set or correct the last period start date.

        Raises:
            SettingsValidationError: If the date is in the future
        """
        return self.update_cycle(last_period_start=start_date)

    def update_cycle_settings(
        self,
        cycle_length: Optional[int] = None,
        period_length: Optional[int] = None
    ) -> bool:
        """
        Change the configured cycle and period length.

        Raises:
            SettingsValidationError: If the lengths are out of bounds
        """
        return self.update_cycle(cycle_length=cycle_length, period_length=period_length)

    def update_profile(self, **changes: Any) -> bool:
        """
        Update profile fields.

        Raises:
            SettingsValidationError: If a field value is invalid
        """
        try:
            return self.store.update_user_profile(**changes)
        except ValidationError as e:
            raise SettingsValidationError(format_validation_error(e))

    def complete_onboarding(self) -> bool:
        return self.store.set_onboarding_complete(True)

    def set_pin(self, pin: str) -> bool:
        """
        Store a new app lock PIN and enable the lock.

        Raises:
            SettingsValidationError: If the PIN is not exactly four digits
        """
        if not PIN_PATTERN.fullmatch(pin or ""):
            raise SettingsValidationError(f"pin: PIN must be exactly {PIN_LENGTH} digits")
        if self.pin_store is None or not self.pin_store.set_pin(pin):
            return False
        return self.store.update_user_profile(pin_enabled=True)

    def verify_pin(self, pin: str) -> bool:
        if self.pin_store is None:
            return False
        return self.pin_store.verify_pin(pin)

    def remove_pin(self) -> bool:
        """Remove the app lock PIN and disable the lock."""
        if self.pin_store is not None and not self.pin_store.clear_pin():
            return False
        return self.store.update_user_profile(pin_enabled=False)

    def delete_all_data(self) -> bool:
        """
        Delete every record of the user. This cannot be undone.

        Returns:
            True if everything was deleted
        """
        logger.warning("Deleting all user data", extra={"user_id": self.store.user_id})
        return self.store.clear_all()
