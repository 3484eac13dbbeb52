"""
Service module for menstrual cycle state calculations.

This module turns the user's cycle configuration into the current cycle day,
phase, fertility flags and fertility rating. Everything here is pure: no storage access, no
clock reads unless the caller leaves the date out.

Typical usage:
    cycle_data = store.get_cycle_data()
    status = calculate_cycle_status(cycle_data)
    next_period = calculate_next_period_date(cycle_data)
"""
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from cycle_tracker.models.cycle import (
    CycleData,
    CyclePhase,
    CycleStatus,
    FertilityLevel,
    FertilityRating,
    PregnancyChance
)
from cycle_tracker.services.constants import (
    LUTEAL_PHASE_DAYS,
    FERTILE_DAYS_BEFORE_OVULATION,
    FERTILE_DAYS_AFTER_OVULATION
)

DateLike = Union[date, datetime]


def to_calendar_date(value: DateLike) -> date:
    """
    Strip the time of day from a date or datetime.

    Args:
        value: Date or datetime to normalise

    Returns:
        Calendar date with no time component
    """
    if isinstance(value, datetime):
        return value.date()
    return value


def calculate_fertility_days(cycle_length: int) -> Tuple[int, int, int]:
    """
    Calculate ovulation and fertile window cycle days.

    Ovulation is placed a fixed luteal span before the end of the cycle. The
    fertile window is the five days before ovulation through the day after.

    Args:
        cycle_length: Configured cycle length in days

    Returns:
        Tuple of (ovulation day, fertile window start, fertile window end)

    Example:
        >>> calculate_fertility_days(28)
        (14, 9, 15)
    """
    ovulation_day = cycle_length - LUTEAL_PHASE_DAYS
    return (
        ovulation_day,
        ovulation_day - FERTILE_DAYS_BEFORE_OVULATION,
        ovulation_day + FERTILE_DAYS_AFTER_OVULATION
    )


def determine_phase(cycle_day: int, cycle_length: int, period_length: int) -> CyclePhase:
    """
    Classify a cycle day into a phase.

    Args:
        cycle_day: Day in the cycle (1-based)
        cycle_length: Configured cycle length in days
        period_length: Configured period length in days

    Returns:
        Phase for the given day

    Example:
        >>> determine_phase(6, 28, 5)
        <CyclePhase.FOLLICULAR: 'follicular'>
    """
    _, fertile_start, fertile_end = calculate_fertility_days(cycle_length)

    if cycle_day <= period_length:
        return CyclePhase.PERIOD
    elif cycle_day < fertile_start:
        return CyclePhase.FOLLICULAR
    elif fertile_start <= cycle_day <= fertile_end:
        return CyclePhase.OVULATION
    return CyclePhase.LUTEAL


def calculate_cycle_status(cycle_data: CycleData, today: Optional[DateLike] = None) -> CycleStatus:
    """
    Calculate the user's position in the current cycle.

    Cycles are assumed to repeat every cycle_length days from the last period
    start, so the day number wraps back to 1 at each boundary. A start date in
    the future counts as day 1. Short cycle lengths give degenerate phases
    instead of errors.

    Args:
        cycle_data: Cycle configuration and entries
        today: Date to evaluate, defaults to the current date

    Returns:
        CycleStatus for the given day

    Example:
        >>> data = CycleData(last_period_start=date(2024, 1, 1))
        >>> calculate_cycle_status(data, date(2024, 1, 14)).ovulation_day
        True
    """
    if cycle_data.last_period_start is None:
        return CycleStatus(
            current_day=1,
            phase=CyclePhase.PERIOD,
            days_until_period=0,
            fertile_window=False,
            ovulation_day=False
        )

    if today is None:
        today = date.today()

    start = to_calendar_date(cycle_data.last_period_start)
    elapsed_days = max(0, (to_calendar_date(today) - start).days)

    cycle_length = cycle_data.cycle_length
    current_day = (elapsed_days % cycle_length) + 1
    days_until_period = max(0, cycle_length - current_day + 1)

    ovulation_day, fertile_start, fertile_end = calculate_fertility_days(cycle_length)

    return CycleStatus(
        current_day=current_day,
        phase=determine_phase(current_day, cycle_length, cycle_data.period_length),
        days_until_period=days_until_period,
        fertile_window=fertile_start <= current_day <= fertile_end,
        ovulation_day=current_day == ovulation_day
    )


def calculate_fertility_level(status: CycleStatus) -> FertilityLevel:
    """
    Rate today's fertility and chance of pregnancy from the cycle status.

    Ovulation day outranks the rest of the fertile window, which outranks
    the period.
    """
    if status.ovulation_day:
        return FertilityLevel(fertility=FertilityRating.PEAK, pregnancy_chance=PregnancyChance.HIGH)
    if status.fertile_window:
        return FertilityLevel(fertility=FertilityRating.HIGH, pregnancy_chance=PregnancyChance.MEDIUM)
    if status.phase == CyclePhase.PERIOD:
        return FertilityLevel(fertility=FertilityRating.LOW, pregnancy_chance=PregnancyChance.VERY_LOW)
    return FertilityLevel(fertility=FertilityRating.INCREASING, pregnancy_chance=PregnancyChance.LOW)


def calculate_next_period_date(cycle_data: CycleData, today: Optional[DateLike] = None) -> Optional[date]:
    """
    Calculate the expected start date of the next period.

    Args:
        cycle_data: Cycle configuration and entries
        today: Date to evaluate, defaults to the current date

    Returns:
        Expected next period start, or None when no period start is set
    """
    if cycle_data.last_period_start is None:
        return None
    if today is None:
        today = date.today()

    status = calculate_cycle_status(cycle_data, today)
    return to_calendar_date(today) + timedelta(days=status.days_until_period)


def calculate_pregnancy_week(last_period_start: Optional[date], today: Optional[DateLike] = None) -> int:
    """
    Calculate the pregnancy week using the last menstrual period method.

    Args:
        last_period_start: First day of the last period
        today: Date to evaluate, defaults to the current date

    Returns:
        Completed weeks since the last period start, 0 when unknown
    """
    if last_period_start is None:
        return 0
    if today is None:
        today = date.today()

    days_since = (to_calendar_date(today) - to_calendar_date(last_period_start)).days
    return max(0, days_since // 7)
