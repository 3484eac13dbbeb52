"""
Prediction model for externally generated cycle forecasts.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Prediction(BaseModel):
    """
    Represents a forecast returned by the prediction service.

    The data_hash ties the forecast to the cycle data it was generated from so
    the cache can tell when the input changed.
    """
    next_period_date: date
    predicted_cycle_length: int
    fertile_window_start: Optional[date] = None
    fertile_window_end: Optional[date] = None
    insights: List[str] = Field(default_factory=list, max_length=5)
    tips: List[str] = Field(default_factory=list, max_length=4)
    confidence: float = Field(50, ge=0, le=100)
    generated_at: datetime
    data_hash: str
