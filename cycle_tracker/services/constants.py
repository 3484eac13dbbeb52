"""
Constants shared by the cycle services.
"""
from datetime import timedelta

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

# Luteal phase is modelled as a fixed span regardless of cycle length
LUTEAL_PHASE_DAYS = 14
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1

# Gaps between flow days outside this open interval are not cycle lengths
MIN_PLAUSIBLE_CYCLE_GAP = 15
MAX_PLAUSIBLE_CYCLE_GAP = 60

PREDICTION_CACHE_TTL = timedelta(hours=6)

MAX_PROMPT_ENTRIES = 30
MAX_INSIGHTS = 5
MAX_TIPS = 4
DEFAULT_CONFIDENCE = 50
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100

PIN_LENGTH = 4

HISTORY_FILTERS = ("all", "symptoms", "flow", "notes")
