"""
Service-level exceptions.

This module contains exceptions that can be raised by the tracker services
and the prediction client.
"""


class ValidationFailedError(Exception):
    """Base exception for input rejected before it reaches storage."""
    pass


class EntryValidationError(ValidationFailedError):
    """Raised when a logged day fails validation (e.g. BBT out of range)."""
    pass


class SettingsValidationError(ValidationFailedError):
    """Raised when cycle settings, profile fields or a PIN are invalid."""
    pass


class PredictionError(Exception):
    """Base exception for prediction client errors."""
    pass


class PredictionConfigError(PredictionError):
    """Raised when the prediction endpoint, key or model is not configured."""
    pass


class InsufficientDataError(PredictionError):
    """Raised when there is not enough cycle data to ask for a prediction."""
    pass


class PredictionTransportError(PredictionError):
    """Raised when the prediction endpoint cannot be reached."""
    pass


class PredictionAPIError(PredictionError):
    """Raised when the prediction endpoint answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(PredictionError):
    """Raised when the completion carries no usable text."""
    pass


class InvalidJSONError(PredictionError):
    """Raised when the completion text is not a JSON object."""
    pass


class InvalidPredictionFormatError(PredictionError):
    """Raised when required prediction fields are missing or malformed."""
    pass
