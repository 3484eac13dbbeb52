"""
Middleware functions for request processing.
"""
import json
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict

from cycle_tracker.services.exceptions import ValidationFailedError
from cycle_tracker.utils.logging import logger


class BadRequestError(Exception):
    """Raised when a request cannot be parsed or lacks required values."""
    pass


@dataclass
class ApiRequest:
    """Parsed API Gateway proxy request."""
    user_id: str
    method: str = "GET"
    body: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, str] = field(default_factory=dict)


def json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Build an API Gateway proxy response with a JSON body."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str)
    }


def parse_request(event: Dict[str, Any]) -> ApiRequest:
    """
    Parse an API Gateway proxy event.

    The user ID is taken from the JSON body first, then the query string.

    Raises:
        BadRequestError: If the body is not a JSON object or user_id is missing
    """
    raw_body = event.get("body") or "{}"
    if isinstance(raw_body, str):
        try:
            body = json.loads(raw_body)
        except json.JSONDecodeError:
            raise BadRequestError("Request body is not valid JSON")
    else:
        body = raw_body
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object")

    query = event.get("queryStringParameters") or {}
    user_id = body.pop("user_id", None) or query.get("user_id")
    if not user_id:
        raise BadRequestError("Missing user_id")

    return ApiRequest(
        user_id=str(user_id),
        method=event.get("httpMethod", "GET"),
        body=body,
        query=query
    )


def api_handler(f: Callable) -> Callable:
    """
    Decorator turning a request function into an API Gateway handler.

    The wrapped function receives the parsed ApiRequest and returns a
    (status_code, body) tuple. Validation failures become 400 responses and
    any other error a 500.

    Args:
        f: Request function to wrap

    Returns:
        Lambda handler function
    """
    @wraps(f)
    def wrapped(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        logger.bind_user(None)
        try:
            request = parse_request(event)
        except BadRequestError as e:
            logger.warning("Bad request", extra={"error": str(e)})
            return json_response(400, {"error": str(e)})

        logger.bind_user(request.user_id)
        try:
            status_code, body = f(request, context)
            return json_response(status_code, body)
        except (BadRequestError, ValidationFailedError) as e:
            logger.warning("Rejected request", extra={"error": str(e)})
            return json_response(400, {"error": str(e)})
        except Exception as e:
            logger.exception("Error processing request")
            return json_response(500, {"error": str(e)})

    return wrapped
