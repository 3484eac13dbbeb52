"""
Prediction service API client implementation.
"""
import os
from datetime import date, datetime
from typing import Any, Dict, Optional

import requests
from aws_lambda_powertools import Logger

from cycle_tracker.models.cycle import CycleData
from cycle_tracker.models.entry import utc_now
from cycle_tracker.models.prediction import Prediction
from cycle_tracker.models.user import UserProfile
from cycle_tracker.services.exceptions import (
    PredictionConfigError,
    InsufficientDataError,
    PredictionTransportError,
    PredictionAPIError,
    EmptyResponseError,
    InvalidJSONError
)
from .fingerprint import generate_data_hash
from .parsers import extract_content, parse_prediction
from .prompts import build_system_prompt, build_user_message

logger = Logger()

DEFAULT_TIMEOUT_SECONDS = 60


class PredictionClient:
    """
    Client for an OpenAI-compatible chat completion endpoint.

    The endpoint, key and model come from configuration so the vendor can be
    swapped without touching prompt building or response parsing.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = base_url or os.environ.get("PREDICTION_API_URL")
        self.api_key = api_key or os.environ.get("PREDICTION_API_KEY")
        self.model = model or os.environ.get("PREDICTION_MODEL")
        self.timeout = timeout or float(
            os.environ.get("PREDICTION_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key and self.model)

    def build_payload(self, cycle_data: CycleData, profile: UserProfile, today: date) -> Dict[str, Any]:
        """
        Build the chat completion request body.

        Args:
            cycle_data: Cycle configuration and entries
            profile: User profile
            today: Date the prediction is requested on

        Returns:
            JSON-serialisable request body
        """
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt()},
                {"role": "user", "content": build_user_message(cycle_data, profile, today)}
            ],
            "temperature": 0.3,
            "max_tokens": 1500
        }

    def get_prediction(
        self,
        cycle_data: CycleData,
        profile: UserProfile,
        now: Optional[datetime] = None
    ) -> Prediction:
        """
        Request a cycle prediction.

        There are no retries and no fallback values: any failure raises.

        Args:
            cycle_data: Cycle configuration and entries
            profile: User profile
            now: Request time, defaults to the current UTC time

        Returns:
            Validated Prediction stamped with the data fingerprint

        Raises:
            InsufficientDataError: If no period start or no entries are logged
            PredictionConfigError: If endpoint, key or model are missing
            PredictionTransportError: If the endpoint cannot be reached
            PredictionAPIError: If the endpoint returns a non-2xx status
            EmptyResponseError: If the completion has no text
            InvalidJSONError: If the body or completion is not valid JSON
            InvalidPredictionFormatError: If required fields are missing
        """
        if cycle_data.last_period_start is None or not cycle_data.entries:
            raise InsufficientDataError("Not enough cycle data to generate prediction")

        if not self.is_configured:
            raise PredictionConfigError(
                "Prediction service not configured. Set PREDICTION_API_URL, "
                "PREDICTION_API_KEY and PREDICTION_MODEL."
            )

        if now is None:
            now = utc_now()

        logger.info("Requesting prediction", extra={"model": self.model})

        try:
            response = requests.post(
                self.base_url,
                json=self.build_payload(cycle_data, profile, now.date()),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    "X-Title": "Cycle Tracker"
                },
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Prediction request failed", extra={
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise PredictionTransportError(f"Could not reach prediction service: {str(e)}")

        if not response.ok:
            body = response.text[:150]
            logger.error("Prediction API error", extra={
                "status_code": response.status_code,
                "body": response.text[:200]
            })
            raise PredictionAPIError(response.status_code, f"API error {response.status_code}: {body}")

        try:
            payload = response.json()
        except ValueError:
            raise InvalidJSONError("Prediction service returned a non-JSON body")

        content = extract_content(payload)
        if not content.strip():
            logger.error("Empty completion from prediction service", extra={"model": self.model})
            raise EmptyResponseError("API returned empty response for this model")

        prediction = parse_prediction(
            content,
            data_hash=generate_data_hash(cycle_data),
            generated_at=now
        )
        logger.info("Prediction generated", extra={
            "model": self.model,
            "confidence": prediction.confidence
        })
        return prediction
