"""
Lambda handler for cycle predictions.
"""
import asyncio
from typing import Any, Dict, Tuple

from aws_lambda_powertools.utilities.typing import LambdaContext

from cycle_tracker.utils.clients import get_prediction_cache
from cycle_tracker.utils.logging import logger
from cycle_tracker.utils.middleware import ApiRequest, api_handler


@logger.inject_lambda_context
@api_handler
def handler(request: ApiRequest, context: LambdaContext) -> Tuple[int, Dict[str, Any]]:
    """
    Handle prediction request.

    Serves the cached prediction while it is fresh. With "refresh": true in the
    body a new prediction is requested regardless of the cache. When the
    request fails, the last stored prediction is returned marked as stale
    together with the error.

    Args:
        request: Parsed request
        context: Lambda context

    Returns:
        Status code and body with prediction and error
    """
    cache = get_prediction_cache(request.user_id)
    store = cache.store
    cycle_data = store.get_cycle_data()
    profile = store.get_user_profile()

    if request.body.get("refresh"):
        prediction = asyncio.run(cache.refresh(cycle_data, profile))
    else:
        prediction = asyncio.run(cache.load(cycle_data, profile))

    stale = False
    if prediction is None and cache.error:
        prediction = store.get_cached_prediction()
        stale = prediction is not None

    if prediction is None and cache.error:
        return 502, {"prediction": None, "stale": False, "error": cache.error}

    return 200, {
        "prediction": prediction.model_dump(mode="json") if prediction else None,
        "stale": stale,
        "error": cache.error
    }
