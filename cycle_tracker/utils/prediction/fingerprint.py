"""
Change-detection fingerprint for cycle data.
"""
from cycle_tracker.models.cycle import CycleData

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_data_hash(cycle_data: CycleData) -> str:
    """
    Generate a short fingerprint of the inputs a prediction depends on.

    Covers the last period start, the number of entries and the configured
    lengths. It only detects that the data changed; it is not collision
    resistant.

    Args:
        cycle_data: Cycle data to fingerprint

    Returns:
        Base-36 string of the absolute 32-bit string hash

    Example:
        >>> generate_data_hash(CycleData()) == generate_data_hash(CycleData())
        True
    """
    last_period_start = (
        cycle_data.last_period_start.isoformat()
        if cycle_data.last_period_start else "null"
    )
    key = (
        f"{last_period_start}-{len(cycle_data.entries)}-"
        f"{cycle_data.cycle_length}-{cycle_data.period_length}"
    )

    value = 0
    for char in key:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))
