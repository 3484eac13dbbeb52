"""
Statistics calculation service for cycle tracking data.

This module reconstructs historical cycle lengths from logged flow days and
summarises them for trend display.
"""
import math
from datetime import date
from statistics import mean
from typing import List

from aws_lambda_powertools import Logger

from cycle_tracker.models.cycle import CycleStats
from cycle_tracker.models.entry import CycleEntry
from cycle_tracker.services.constants import MIN_PLAUSIBLE_CYCLE_GAP, MAX_PLAUSIBLE_CYCLE_GAP

logger = Logger()


def get_flow_dates(entries: List[CycleEntry]) -> List[date]:
    """
    Collect the dates of bleeding days in chronological order.

    Args:
        entries: Cycle entries in any order

    Returns:
        Sorted list of dates whose flow is light, medium or heavy
    """
    return sorted(entry.date for entry in entries if entry.has_flow)


def calculate_cycle_gaps(flow_dates: List[date]) -> List[int]:
    """
    Calculate plausible cycle lengths between consecutive flow days.

    Gaps of 15 days or less (consecutive bleeding days, spotting) and of 60
    days or more (missing data) are dropped.

    Args:
        flow_dates: Flow dates sorted ascending

    Returns:
        List of gaps in days that fall strictly inside the plausible range
    """
    gaps = []
    for previous, current in zip(flow_dates, flow_dates[1:]):
        gap = (current - previous).days
        if MIN_PLAUSIBLE_CYCLE_GAP < gap < MAX_PLAUSIBLE_CYCLE_GAP:
            gaps.append(gap)
    return gaps


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_cycle_statistics(entries: List[CycleEntry], fallback_cycle_length: int) -> CycleStats:
    """
    Calculate average, shortest and longest cycle lengths.

    Falls back to the configured cycle length when there are fewer than two
    flow days or no plausible gap between them. total_entries always counts
    every entry, flow or not.

    Args:
        entries: Cycle entries in any order
        fallback_cycle_length: Configured cycle length used when data is sparse

    Returns:
        CycleStats for the given entries

    Example:
        >>> stats = calculate_cycle_statistics(entries, 28)
        >>> print(f"Average cycle: {stats.avg_length} days")
    """
    fallback = CycleStats(
        avg_length=fallback_cycle_length,
        shortest_cycle=fallback_cycle_length,
        longest_cycle=fallback_cycle_length,
        total_entries=len(entries)
    )

    flow_dates = get_flow_dates(entries)
    if len(flow_dates) < 2:
        return fallback

    gaps = calculate_cycle_gaps(flow_dates)
    if not gaps:
        logger.debug("No plausible cycle gaps found", extra={
            "flow_days": len(flow_dates)
        })
        return fallback

    return CycleStats(
        avg_length=_round_half_up(mean(gaps)),
        shortest_cycle=min(gaps),
        longest_cycle=max(gaps),
        total_entries=len(entries)
    )
