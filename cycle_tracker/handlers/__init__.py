"""
Lambda handlers package for AWS Lambda functions.
"""
from .history import handler as history_handler
from .log_entry import handler as log_entry_handler
from .prediction import handler as prediction_handler
from .settings import handler as settings_handler
from .status import handler as status_handler

__all__ = [
    "history_handler",
    "log_entry_handler",
    "prediction_handler",
    "settings_handler",
    "status_handler"
]
