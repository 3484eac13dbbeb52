"""
Lambda handler for logging a day.
"""
from typing import Any, Dict, Tuple

from aws_lambda_powertools.utilities.typing import LambdaContext

from cycle_tracker.handlers.status import overview_to_dict
from cycle_tracker.utils.clients import get_tracker
from cycle_tracker.utils.logging import logger
from cycle_tracker.utils.middleware import ApiRequest, BadRequestError, api_handler

ENTRY_FIELDS = (
    "date",
    "flow",
    "mood",
    "symptoms",
    "notes",
    "basal_body_temperature",
    "water_intake_ml"
)

# Blank or zero measurements mean "not measured"
OPTIONAL_MEASUREMENTS = ("basal_body_temperature", "water_intake_ml")


def entry_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Select entry fields from a request body.

    Raises:
        BadRequestError: If no date is given
    """
    fields = {name: value for name, value in body.items() if name in ENTRY_FIELDS}
    if not fields.get("date"):
        raise BadRequestError("Missing date")

    for name in OPTIONAL_MEASUREMENTS:
        value = fields.get(name)
        if value is None or value == "" or value == 0:
            fields.pop(name, None)
    return fields


@logger.inject_lambda_context
@api_handler
def handler(request: ApiRequest, context: LambdaContext) -> Tuple[int, Dict[str, Any]]:
    """
    Handle day logging request.

    Args:
        request: Parsed request with the entry fields in the body
        context: Lambda context

    Returns:
        Status code and body with the stored entry and recomputed overview
    """
    tracker = get_tracker(request.user_id)
    entry = tracker.log_entry(**entry_fields(request.body))
    if entry is None:
        return 500, {"error": "Could not save entry"}

    logger.info("Logged entry", extra={
        "user_id": request.user_id,
        "date": entry.date.isoformat()
    })
    return 200, {
        "entry": entry.model_dump(mode="json"),
        **overview_to_dict(tracker.get_overview())
    }
