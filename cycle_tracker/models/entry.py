"""
Entry model definition for daily cycle observations.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class FlowLevel(str, Enum):
    """
    Menstrual flow intensity logged for a day.
    """
    NONE = "none"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class MoodType(str, Enum):
    """
    Mood options available when logging a day.
    """
    HAPPY = "happy"
    CALM = "calm"
    TIRED = "tired"
    ANXIOUS = "anxious"
    IRRITATED = "irritated"
    SAD = "sad"


class SymptomType(str, Enum):
    """
    Catalogue of symptoms that can be attached to an entry.
    """
    CRAMPS = "cramps"
    HEADACHE = "headache"
    BLOATING = "bloating"
    FATIGUE = "fatigue"
    ACNE = "acne"
    INSOMNIA = "insomnia"
    BACK_PAIN = "backpain"
    NAUSEA = "nausea"


BLEEDING_FLOW_LEVELS = (FlowLevel.LIGHT, FlowLevel.MEDIUM, FlowLevel.HEAVY)


class CycleEntry(BaseModel):
    """
    Represents one logged day. Entries are unique per date.
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    date: date
    flow: Optional[FlowLevel] = None
    mood: Optional[MoodType] = None
    symptoms: List[SymptomType] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=500)
    basal_body_temperature: Optional[float] = Field(None, ge=35, le=42)
    water_intake_ml: Optional[int] = Field(None, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("symptoms")
    @classmethod
    def dedupe_symptoms(cls, symptoms: List[SymptomType]) -> List[SymptomType]:
        """Symptoms form a set; keep the first occurrence of each tag."""
        return list(dict.fromkeys(symptoms))

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, notes: Optional[str]) -> Optional[str]:
        if notes is None:
            return None
        notes = notes.strip()
        return notes or None

    @property
    def has_flow(self) -> bool:
        """Check if this entry marks a bleeding day."""
        return self.flow in BLEEDING_FLOW_LEVELS
