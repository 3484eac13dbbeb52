"""
Lambda handler for settings, PIN lock and data deletion.
"""
from typing import Any, Callable, Dict, Tuple

from aws_lambda_powertools.utilities.typing import LambdaContext

from cycle_tracker.services.tracker import CycleTracker
from cycle_tracker.utils.clients import get_tracker
from cycle_tracker.utils.logging import logger
from cycle_tracker.utils.middleware import ApiRequest, BadRequestError, api_handler
from cycle_tracker.utils.validators import validate_date

PROFILE_FIELDS = (
    "name",
    "goal",
    "biometric_enabled",
    "notifications_enabled",
    "reminder_time",
    "partner_sync_enabled"
)


def _result(success: bool, **extra: Any) -> Tuple[int, Dict[str, Any]]:
    if not success:
        return 500, {"ok": False, "error": "Could not save changes"}
    return 200, {"ok": True, **extra}


def update_cycle(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    start = None
    if "last_period_start" in body:
        start = validate_date(body["last_period_start"])
        if start is None:
            raise BadRequestError("Invalid last_period_start. Use YYYY-MM-DD")
    return _result(tracker.update_cycle(
        last_period_start=start,
        cycle_length=body.get("cycle_length"),
        period_length=body.get("period_length")
    ))


def update_profile(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    changes = {name: value for name, value in body.items() if name in PROFILE_FIELDS}
    return _result(tracker.update_profile(**changes))


def set_pin(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    return _result(tracker.set_pin(str(body.get("pin", ""))))


def verify_pin(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    return 200, {"ok": True, "valid": tracker.verify_pin(str(body.get("pin", "")))}


def remove_pin(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    return _result(tracker.remove_pin())


def complete_onboarding(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    return _result(tracker.complete_onboarding())


def delete_all_data(tracker: CycleTracker, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
    if body.get("confirm") is not True:
        raise BadRequestError("Deleting all data requires \"confirm\": true")
    return _result(tracker.delete_all_data())


ACTIONS: Dict[str, Callable[[CycleTracker, Dict[str, Any]], Tuple[int, Dict[str, Any]]]] = {
    "update_cycle": update_cycle,
    "update_profile": update_profile,
    "set_pin": set_pin,
    "verify_pin": verify_pin,
    "remove_pin": remove_pin,
    "complete_onboarding": complete_onboarding,
    "delete_all_data": delete_all_data
}


@logger.inject_lambda_context
@api_handler
def handler(request: ApiRequest, context: LambdaContext) -> Tuple[int, Dict[str, Any]]:
    """
    Handle settings request.

    The body names an action (see ACTIONS) and carries its arguments.

    Args:
        request: Parsed request
        context: Lambda context

    Returns:
        Status code and body with the action result
    """
    action = request.body.get("action")
    if action not in ACTIONS:
        raise BadRequestError(
            f"Unknown action '{action}'. Expected one of: {', '.join(ACTIONS)}"
        )

    logger.info("Processing settings action", extra={
        "user_id": request.user_id,
        "action": action
    })
    return ACTIONS[action](get_tracker(request.user_id), request.body)
