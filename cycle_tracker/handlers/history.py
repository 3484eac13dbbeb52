"""
Lambda handler for browsing logged history.
"""
from typing import Any, Dict, Tuple

from aws_lambda_powertools.utilities.typing import LambdaContext

from cycle_tracker.utils.clients import get_tracker
from cycle_tracker.utils.logging import logger
from cycle_tracker.utils.middleware import ApiRequest, BadRequestError, api_handler
from cycle_tracker.utils.validators import parse_positive_int, validate_date


@logger.inject_lambda_context
@api_handler
def handler(request: ApiRequest, context: LambdaContext) -> Tuple[int, Dict[str, Any]]:
    """
    Handle history request.

    Query parameters:
        filter: all, symptoms, flow or notes
        periods: Optional number of most recent periods to include
        date: Optional YYYY-MM-DD to fetch a single day's entry

    Returns:
        Status code and body with entries and period ranges
    """
    tracker = get_tracker(request.user_id)

    if "date" in request.query:
        entry_date = validate_date(request.query["date"])
        if entry_date is None:
            raise BadRequestError("Invalid date format. Use YYYY-MM-DD")
        entry = tracker.get_entry(entry_date)
        return 200, {"entry": entry.model_dump(mode="json") if entry else None}

    entries = tracker.get_history(request.query.get("filter", "all"))
    periods = parse_positive_int(request.query.get("periods"))

    return 200, {
        "entries": [entry.model_dump(mode="json") for entry in entries],
        "periods": [
            {
                **period,
                "start_date": period["start_date"].isoformat(),
                "end_date": period["end_date"].isoformat()
            }
            for period in tracker.get_period_history(periods=periods)
        ]
    }
