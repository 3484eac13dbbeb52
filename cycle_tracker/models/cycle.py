"""
Cycle configuration and derived cycle state models.
"""
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from cycle_tracker.models.entry import CycleEntry


class CyclePhase(str, Enum):
    """
    Coarse classification of where a day falls in the cycle.
    """
    PERIOD = "period"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"


class CycleData(BaseModel):
    """
    The user's cycle configuration and full entry history.

    Length bounds are checked when the record is built from input. Code that
    only reads cycle data must not assume them.
    """
    last_period_start: Optional[date] = None
    cycle_length: int = Field(28, ge=15, le=60)
    period_length: int = Field(5, ge=1)
    entries: List[CycleEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_period_shorter_than_cycle(self) -> "CycleData":
        if self.period_length >= self.cycle_length:
            raise ValueError(
                f"Period length ({self.period_length}) must be shorter than "
                f"cycle length ({self.cycle_length})"
            )
        return self


class CycleStatus(BaseModel):
    """
    Derived position within the current cycle. Never persisted.
    """
    current_day: int
    phase: CyclePhase
    days_until_period: int
    fertile_window: bool
    ovulation_day: bool


class CycleStats(BaseModel):
    """
    Aggregate cycle length statistics reconstructed from flow entries.
    """
    avg_length: int
    shortest_cycle: int
    longest_cycle: int
    total_entries: int


class FertilityRating(str, Enum):
    LOW = "Low"
    INCREASING = "Increasing"
    HIGH = "High"
    PEAK = "Peak"


class PregnancyChance(str, Enum):
    VERY_LOW = "Very Low"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class FertilityLevel(BaseModel):
    """
    Display rating of today's fertility derived from a CycleStatus.
    """
    fertility: FertilityRating
    pregnancy_chance: PregnancyChance
