"""
Lambda handler for the cycle overview.
"""
from typing import Any, Dict, Tuple

from aws_lambda_powertools.utilities.typing import LambdaContext

from cycle_tracker.utils.clients import get_tracker
from cycle_tracker.utils.logging import logger
from cycle_tracker.utils.middleware import ApiRequest, api_handler


def overview_to_dict(overview: Dict[str, Any]) -> Dict[str, Any]:
    """Serialise CycleTracker.get_overview output for a JSON response."""
    next_period = overview["next_period_date"]
    return {
        "status": overview["status"].model_dump(mode="json"),
        "fertility": overview["fertility"].model_dump(mode="json"),
        "stats": overview["stats"].model_dump(mode="json"),
        "next_period_date": next_period.isoformat() if next_period else None,
        "pregnancy_week": overview["pregnancy_week"]
    }


@logger.inject_lambda_context
@api_handler
def handler(request: ApiRequest, context: LambdaContext) -> Tuple[int, Dict[str, Any]]:
    """
    Handle overview request.

    Args:
        request: Parsed request, user_id in the query string
        context: Lambda context

    Returns:
        Status code and body with status, stats, profile and cached prediction
    """
    tracker = get_tracker(request.user_id)
    store = tracker.store

    cycle_data = tracker.get_cycle_data()
    prediction = store.get_cached_prediction()

    return 200, {
        **overview_to_dict(tracker.get_overview(cycle_data)),
        "cycle_settings": {
            "last_period_start": (
                cycle_data.last_period_start.isoformat()
                if cycle_data.last_period_start else None
            ),
            "cycle_length": cycle_data.cycle_length,
            "period_length": cycle_data.period_length
        },
        "profile": store.get_user_profile().model_dump(mode="json"),
        "onboarding_complete": store.is_onboarding_complete(),
        "prediction": prediction.model_dump(mode="json") if prediction else None
    }
