"""
Tests for cycle status calculation.
"""
import pytest
from datetime import date, datetime, timedelta

from cycle_tracker.models.cycle import (
    CycleData,
    CyclePhase,
    FertilityRating,
    PregnancyChance
)
from cycle_tracker.services.cycle import (
    calculate_cycle_status,
    calculate_fertility_days,
    calculate_fertility_level,
    calculate_next_period_date,
    calculate_pregnancy_week,
    determine_phase
)

START = date(2024, 1, 1)


@pytest.fixture
def cycle_data():
    """Default 28 day cycle starting on the first of January."""
    return CycleData(last_period_start=START)


def test_fertility_days_default_cycle():
    """Test ovulation is 14 days before the end of the cycle."""
    assert calculate_fertility_days(28) == (14, 9, 15)
    assert calculate_fertility_days(35) == (21, 16, 22)


@pytest.mark.parametrize("cycle_day,expected", [
    (1, CyclePhase.PERIOD),
    (5, CyclePhase.PERIOD),
    (6, CyclePhase.FOLLICULAR),
    (8, CyclePhase.FOLLICULAR),
    (9, CyclePhase.OVULATION),
    (14, CyclePhase.OVULATION),
    (15, CyclePhase.OVULATION),
    (16, CyclePhase.LUTEAL),
    (28, CyclePhase.LUTEAL),
])
def test_determine_phase(cycle_day, expected):
    """Test phase boundaries for a 28 day cycle with a 5 day period."""
    assert determine_phase(cycle_day, 28, 5) == expected


def test_status_on_period_start(cycle_data):
    """Test the first day of the period."""
    status = calculate_cycle_status(cycle_data, START)
    assert status.current_day == 1
    assert status.phase == CyclePhase.PERIOD
    assert status.days_until_period == 28
    assert not status.fertile_window
    assert not status.ovulation_day


def test_status_on_ovulation_day(cycle_data):
    """Test day 14 is ovulation and inside the fertile window."""
    status = calculate_cycle_status(cycle_data, date(2024, 1, 14))
    assert status.current_day == 14
    assert status.phase == CyclePhase.OVULATION
    assert status.fertile_window
    assert status.ovulation_day
    assert status.days_until_period == 15


def test_status_fertile_window_edges(cycle_data):
    """Test the fertile window spans days 9 to 15 inclusive."""
    assert not calculate_cycle_status(cycle_data, date(2024, 1, 8)).fertile_window
    assert calculate_cycle_status(cycle_data, date(2024, 1, 9)).fertile_window
    assert calculate_cycle_status(cycle_data, date(2024, 1, 15)).fertile_window
    assert not calculate_cycle_status(cycle_data, date(2024, 1, 16)).fertile_window


def test_status_last_day_and_wrap(cycle_data):
    """Test the cycle day wraps back to 1 after cycle_length days."""
    last_day = calculate_cycle_status(cycle_data, date(2024, 1, 28))
    assert last_day.current_day == 28
    assert last_day.days_until_period == 1

    next_cycle = calculate_cycle_status(cycle_data, date(2024, 1, 29))
    assert next_cycle.current_day == 1
    assert next_cycle.phase == CyclePhase.PERIOD
    assert next_cycle.days_until_period == 28


def test_status_bounds_hold_for_every_day(cycle_data):
    """Test day and countdown stay within the cycle for several cycles."""
    for offset in range(0, 120):
        status = calculate_cycle_status(cycle_data, START + timedelta(days=offset))
        assert 1 <= status.current_day <= cycle_data.cycle_length
        assert 1 <= status.days_until_period <= cycle_data.cycle_length
        assert status.ovulation_day == (status.current_day == 14)
        if status.ovulation_day:
            assert status.fertile_window


def test_status_without_period_start():
    """Test the placeholder status when no period start is known."""
    status = calculate_cycle_status(CycleData(), date(2024, 1, 10))
    assert status.current_day == 1
    assert status.phase == CyclePhase.PERIOD
    assert status.days_until_period == 0
    assert not status.fertile_window
    assert not status.ovulation_day


def test_status_with_future_start():
    """Test a start date after today counts as day 1."""
    data = CycleData(last_period_start=date(2024, 2, 1))
    status = calculate_cycle_status(data, date(2024, 1, 20))
    assert status.current_day == 1
    assert status.days_until_period == 28


def test_status_ignores_time_of_day(cycle_data):
    """Test datetimes are reduced to calendar dates."""
    status = calculate_cycle_status(cycle_data, datetime(2024, 1, 14, 23, 59))
    assert status.current_day == 14


def test_status_with_custom_lengths():
    """Test a 35 day cycle moves ovulation to day 21."""
    data = CycleData(last_period_start=START, cycle_length=35, period_length=7)
    assert calculate_cycle_status(data, date(2024, 1, 7)).phase == CyclePhase.PERIOD
    assert calculate_cycle_status(data, date(2024, 1, 8)).phase == CyclePhase.FOLLICULAR
    assert calculate_cycle_status(data, date(2024, 1, 21)).ovulation_day


def test_status_short_cycle_does_not_fail():
    """Test lengths below the luteal span give degenerate phases, not errors."""
    data = CycleData.model_construct(
        last_period_start=START,
        cycle_length=10,
        period_length=5,
        entries=[]
    )
    first = calculate_cycle_status(data, START)
    assert first.phase == CyclePhase.PERIOD
    assert not first.fertile_window

    later = calculate_cycle_status(data, START + timedelta(days=7))
    assert later.current_day == 8
    assert later.phase == CyclePhase.LUTEAL
    assert later.days_until_period == 3
    assert not later.ovulation_day


def test_next_period_date(cycle_data):
    """Test the next period is today plus the days left in the cycle."""
    assert calculate_next_period_date(cycle_data, date(2024, 1, 10)) == date(2024, 1, 29)
    assert calculate_next_period_date(cycle_data, date(2024, 1, 29)) == date(2024, 2, 26)


def test_next_period_date_without_start():
    assert calculate_next_period_date(CycleData(), date(2024, 1, 10)) is None


def test_pregnancy_week():
    """Test completed weeks since the last period start."""
    assert calculate_pregnancy_week(START, date(2024, 1, 7)) == 0
    assert calculate_pregnancy_week(START, date(2024, 1, 8)) == 1
    assert calculate_pregnancy_week(START, date(2024, 3, 10)) == 9
    assert calculate_pregnancy_week(date(2024, 2, 1), date(2024, 1, 1)) == 0
    assert calculate_pregnancy_week(None, date(2024, 1, 1)) == 0


def test_cycle_data_rejects_invalid_lengths():
    """Test cycle settings are validated on input."""
    with pytest.raises(ValueError):
        CycleData(cycle_length=14)
    with pytest.raises(ValueError):
        CycleData(cycle_length=61)
    with pytest.raises(ValueError):
        CycleData(cycle_length=28, period_length=28)
    with pytest.raises(ValueError):
        CycleData(period_length=0)


@pytest.mark.parametrize("elapsed,expected_day", [(27, 28), (28, 1), (56, 1), (57, 2)])
def test_day_wraps_at_cycle_boundary(cycle_data, elapsed, expected_day):
    status = calculate_cycle_status(cycle_data, START + timedelta(days=elapsed))
    assert status.current_day == expected_day


def test_status_is_deterministic(cycle_data):
    today = date(2024, 2, 17)
    assert calculate_cycle_status(cycle_data, today) == calculate_cycle_status(cycle_data, today)


@pytest.mark.parametrize("day,fertility,chance", [
    (14, FertilityRating.PEAK, PregnancyChance.HIGH),
    (10, FertilityRating.HIGH, PregnancyChance.MEDIUM),
    (15, FertilityRating.HIGH, PregnancyChance.MEDIUM),
    (3, FertilityRating.LOW, PregnancyChance.VERY_LOW),
    (7, FertilityRating.INCREASING, PregnancyChance.LOW),
    (20, FertilityRating.INCREASING, PregnancyChance.LOW),
])
def test_fertility_level(cycle_data, day, fertility, chance):
    """Test the rating for ovulation, fertile window, period and other days."""
    status = calculate_cycle_status(cycle_data, date(2024, 1, day))
    level = calculate_fertility_level(status)
    assert level.fertility == fertility
    assert level.pregnancy_chance == chance


def test_fertility_level_without_period_start():
    """Test the placeholder status rates as a period day."""
    level = calculate_fertility_level(calculate_cycle_status(CycleData(), date(2024, 1, 10)))
    assert level.fertility == FertilityRating.LOW
    assert level.pregnancy_chance == PregnancyChance.VERY_LOW
