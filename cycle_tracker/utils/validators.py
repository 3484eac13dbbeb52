"""
Input validation utilities for API requests.
"""
from datetime import date, datetime
from typing import Any, Optional


def validate_date(date_str: Any) -> Optional[date]:
    """
    Validate and parse date string.

    Args:
        date_str: Date string in YYYY-MM-DD format

    Returns:
        Date object if valid, None otherwise
    """
    if not isinstance(date_str, str):
        return None
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_positive_int(value: Any) -> Optional[int]:
    """
    Parse a query string value as a positive integer.

    Returns:
        Integer if value is a positive whole number, None otherwise
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None
