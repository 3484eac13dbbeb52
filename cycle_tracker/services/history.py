"""
Service module for browsing logged cycle history.

This module provides filtering of logged days for the history view and
grouping of bleeding days into period ranges.

Typical usage:
    entries = store.get_cycle_data().entries
    symptom_days = filter_entries(entries, "symptoms")
    for period in get_period_history(entries, periods=3):
        print(f"{period['start_date']} to {period['end_date']}")
"""
from datetime import date
from typing import Any, Dict, List, Optional

from cycle_tracker.models.entry import CycleEntry
from cycle_tracker.services.constants import HISTORY_FILTERS


def sort_entries(entries: List[CycleEntry], reverse: bool = True) -> List[CycleEntry]:
    """Sort entries by date, newest first by default."""
    return sorted(entries, key=lambda e: e.date, reverse=reverse)


def filter_entries(entries: List[CycleEntry], filter_name: str = "all") -> List[CycleEntry]:
    """
    Filter logged days for the history view.

    Args:
        entries: Cycle entries in any order
        filter_name: One of "all", "symptoms", "flow" or "notes"

    Returns:
        Matching entries, newest first

    Raises:
        ValueError: If the filter name is unknown
    """
    filter_name = filter_name.lower()
    if filter_name not in HISTORY_FILTERS:
        raise ValueError(
            f"Unknown history filter '{filter_name}'. "
            f"Expected one of: {', '.join(HISTORY_FILTERS)}"
        )

    if filter_name == "symptoms":
        matching = [e for e in entries if e.symptoms]
    elif filter_name == "flow":
        matching = [e for e in entries if e.has_flow]
    elif filter_name == "notes":
        matching = [e for e in entries if e.notes]
    else:
        matching = list(entries)

    return sort_entries(matching)


def get_period_history(
    entries: List[CycleEntry],
    periods: Optional[int] = None,
    max_gap: int = 1
) -> List[Dict[str, Any]]:
    """
    Group bleeding days into periods.

    Days are part of the same period if no more than max_gap unlogged days
    separate them.

    Args:
        entries: Cycle entries in any order
        periods: Optional number of most recent periods to return
        max_gap: Maximum number of missing days allowed inside a period

    Returns:
        List of period details, newest first, containing:
        - start_date: First bleeding day
        - end_date: Last bleeding day
        - duration: Days from start to end inclusive
        - flow_days: Number of logged bleeding days
    """
    flow_dates = sorted({e.date for e in entries if e.has_flow})
    if not flow_dates:
        return []

    ranges: List[List[date]] = [[flow_dates[0]]]
    for current in flow_dates[1:]:
        if (current - ranges[-1][-1]).days - 1 <= max_gap:
            ranges[-1].append(current)
        else:
            ranges.append([current])

    history = [
        {
            "start_date": days[0],
            "end_date": days[-1],
            "duration": (days[-1] - days[0]).days + 1,
            "flow_days": len(days)
        }
        for days in reversed(ranges)
    ]

    if periods is not None:
        history = history[:periods]
    return history
