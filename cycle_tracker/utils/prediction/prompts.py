"""
Prompt building for the prediction service.
"""
import json
from datetime import date
from typing import Any, Dict, List

from cycle_tracker.models.cycle import CycleData
from cycle_tracker.models.user import UserProfile
from cycle_tracker.services.constants import MAX_PROMPT_ENTRIES

SYSTEM_PROMPT = """You are a menstrual cycle prediction engine.

You analyze structured cycle data and return a prediction.

IMPORTANT: Respond ONLY with valid JSON in this exact format, no markdown, no explanation:
{
  "nextPeriodDate": "YYYY-MM-DD",
  "predictedCycleLength": <number>,
  "fertileWindowStart": "YYYY-MM-DD",
  "fertileWindowEnd": "YYYY-MM-DD",
  "insights": ["insight1", "insight2"],
  "tips": ["tip1", "tip2"],
  "confidence": <0-100>
}

Rules:
- Return ONLY valid JSON.
- No markdown.
- No explanation outside JSON.
- No extra text.
- No medical claims.
- Use ISO date format (YYYY-MM-DD).
- If data is insufficient, return confidence 0."""


def _compact(data: List[Dict[str, Any]]) -> str:
    return json.dumps(data, separators=(",", ":"))


def build_system_prompt() -> str:
    """Return the system message describing the expected JSON reply."""
    return SYSTEM_PROMPT


def build_user_message(cycle_data: CycleData, profile: UserProfile, today: date) -> str:
    """
    Build the user message carrying the cycle data.

    Only the most recent entries are sent, newest first, regardless of how the
    stored list is ordered.

    Args:
        cycle_data: Cycle configuration and entries
        profile: User profile, for the tracking goal
        today: Date the prediction is requested on

    Returns:
        Plain-text message for the prediction model
    """
    recent = sorted(cycle_data.entries, key=lambda e: e.date, reverse=True)[:MAX_PROMPT_ENTRIES]

    flow_data = [
        {"date": e.date.isoformat(), "flow": e.flow.value}
        for e in recent if e.has_flow
    ]
    mood_data = [
        {"date": e.date.isoformat(), "mood": e.mood.value}
        for e in recent if e.mood
    ]
    symptom_data = [
        {"date": e.date.isoformat(), "symptoms": [s.value for s in e.symptoms]}
        for e in recent if e.symptoms
    ]
    bbt_data = [
        {"date": e.date.isoformat(), "bbt": e.basal_body_temperature}
        for e in recent if e.basal_body_temperature
    ]

    last_period_start = (
        cycle_data.last_period_start.isoformat()
        if cycle_data.last_period_start else "Not set"
    )

    lines = [
        f"Today's date: {today.isoformat()}",
        f"User goal: {profile.goal.value}",
        f"Cycle length setting: {cycle_data.cycle_length} days",
        f"Period length setting: {cycle_data.period_length} days",
        f"Last period start: {last_period_start}",
        f"Total logged entries: {len(cycle_data.entries)}",
        "",
        f"Period flow data: {_compact(flow_data)}",
        f"Mood data: {_compact(mood_data)}",
        f"Symptom data: {_compact(symptom_data)}",
    ]
    if bbt_data:
        lines.append(f"BBT data: {_compact(bbt_data)}")
    lines.extend(["", "Analyze this data and provide cycle predictions."])

    return "\n".join(lines)
