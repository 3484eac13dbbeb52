"""
Shared logging configuration.

Every record is one JSON line. Tracebacks are folded into the "exception" key
of that line instead of spanning several CloudWatch events.
"""
import json
import os
import sys
import traceback
from functools import partial
from typing import Optional

from aws_lambda_powertools import Logger


def format_exception(exc_info) -> Optional[str]:
    """
    Render exception info as a single line, frames joined by ' | '.

    Accepts True (the exception being handled), an exception instance or an
    exc_info tuple.
    """
    if exc_info is True:
        exc_info = sys.exc_info()
    elif isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)

    if not (isinstance(exc_info, tuple) and len(exc_info) == 3 and exc_info[0] is not None):
        return None
    try:
        trace = ''.join(traceback.format_exception(*exc_info))
    except Exception as e:
        return f"Error formatting exception: {str(e)}"
    return trace.replace('\n', ' | ').strip()


class SingleLineLogger(Logger):
    """Logger writing tracebacks on the same line as the message."""

    def exception(self, msg, *args, exc_info=True, **kwargs):
        extra = dict(kwargs.pop('extra', None) or {})
        extra['exception'] = format_exception(exc_info)
        super().exception(msg, *args, exc_info=False, extra=extra, **kwargs)

    def bind_user(self, user_id: Optional[str]) -> None:
        """Tag the following records with a user ID, or untag them with None."""
        if user_id is None:
            self.remove_keys(['user_id'])
        else:
            self.append_keys(user_id=user_id)


logger = SingleLineLogger(
    service=os.environ.get('POWERTOOLS_SERVICE_NAME', 'cycle_tracker'),
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    json_serializer=partial(json.dumps, default=str),
    log_uncaught_exceptions=True,
    use_rfc3339=True
)

logger.append_keys(
    region=os.environ.get('AWS_REGION'),
    function=os.environ.get('AWS_LAMBDA_FUNCTION_NAME'),
    version=os.environ.get('AWS_LAMBDA_FUNCTION_VERSION')
)


def log_exception(logger, message, exc_info=None, **kwargs):
    """Log the current (or given) exception as an error on one line."""
    extra = dict(kwargs.pop('extra', None) or {})
    extra['exception'] = format_exception(exc_info or sys.exc_info())
    logger.error(message, extra=extra, **kwargs)
