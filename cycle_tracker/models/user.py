"""
User profile model definition for the cycle tracker.
"""
from enum import Enum

from pydantic import BaseModel


class GoalType(str, Enum):
    """
    What the user is tracking for.
    """
    TRACK = "track"
    PREGNANT = "pregnant"
    PREGNANCY = "pregnancy"


class UserProfile(BaseModel):
    """
    Represents the user's profile and app settings.
    """
    name: str = ""
    goal: GoalType = GoalType.TRACK
    pin_enabled: bool = False
    biometric_enabled: bool = False
    notifications_enabled: bool = True
    reminder_time: str = "9:00 AM"
    partner_sync_enabled: bool = False
