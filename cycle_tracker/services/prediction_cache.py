"""
Prediction caching service.

This module decides when a stored prediction can be reused and when the
prediction service has to be called again. A cached prediction is fresh only
while it is younger than the TTL and was generated from the same cycle data.

Typical usage:
    cache = PredictionCache(store, PredictionClient())
    prediction = await cache.load(cycle_data, profile)
    if cache.error:
        print(f"Could not update prediction: {cache.error}")
"""
import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from aws_lambda_powertools import Logger

from cycle_tracker.models.cycle import CycleData
from cycle_tracker.models.entry import utc_now
from cycle_tracker.models.prediction import Prediction
from cycle_tracker.models.user import UserProfile
from cycle_tracker.services.constants import PREDICTION_CACHE_TTL
from cycle_tracker.services.exceptions import PredictionError
from cycle_tracker.utils.logging import log_exception
from cycle_tracker.utils.prediction import generate_data_hash

logger = Logger()

Listener = Callable[["PredictionCache"], None]


def has_minimum_data(cycle_data: CycleData) -> bool:
    """Check if there is enough data to ask for a prediction."""
    return cycle_data.last_period_start is not None and len(cycle_data.entries) > 0


class PredictionCache:
    """
    Controller owning the displayed prediction and its refresh policy.

    At most one prediction request runs at a time. A load or refresh issued
    while one is outstanding returns immediately without effect.
    """

    def __init__(
        self,
        store,
        client,
        ttl: timedelta = PREDICTION_CACHE_TTL,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize prediction cache.

        Args:
            store: EntryStore holding the cached prediction
            client: PredictionClient used on cache misses
            ttl: Maximum age of a reusable prediction
            clock: Source of the current time
        """
        self.store = store
        self.client = client
        self.ttl = ttl
        self.clock = clock

        self.prediction: Optional[Prediction] = None
        self.loading = False
        self.error: Optional[str] = None
        self._fetching = False
        self._listeners: List[Listener] = []

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after every state change.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        # Listener errors never abort a fetch
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                log_exception(logger, "Prediction listener failed")

    def is_fresh(
        self,
        cached: Prediction,
        current_data: CycleData,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Check if a cached prediction can be served as is.

        Args:
            cached: Stored prediction
            current_data: Current cycle data
            now: Evaluation time, defaults to the clock

        Returns:
            True if the prediction is within the TTL and its fingerprint
            matches the current data
        """
        if now is None:
            now = self.clock()
        age = now - cached.generated_at
        return age < self.ttl and cached.data_hash == generate_data_hash(current_data)

    async def load(self, current_data: CycleData, profile: UserProfile) -> Optional[Prediction]:
        """
        Serve the cached prediction, fetching a new one when it is stale.

        Args:
            current_data: Current cycle data
            profile: User profile

        Returns:
            The displayed prediction after the call, None if there is none
        """
        if self._fetching:
            logger.debug("Prediction request already in flight, skipping load")
            return self.prediction

        if not has_minimum_data(current_data):
            self.prediction = None
            self._notify()
            return None

        cached = await asyncio.to_thread(self.store.get_cached_prediction)
        if cached is not None and self.is_fresh(cached, current_data):
            logger.info("Using cached prediction", extra={
                "user_id": self.store.user_id,
                "cache_hit": True
            })
            self.prediction = cached
            self._notify()
            return cached

        logger.info("No fresh cached prediction", extra={
            "user_id": self.store.user_id,
            "cache_hit": False
        })
        return await self._fetch(current_data, profile)

    async def refresh(self, current_data: CycleData, profile: UserProfile) -> Optional[Prediction]:
        """
        Fetch a new prediction regardless of the cache.

        Does nothing if a request is in flight or there is not enough data.

        Args:
            current_data: Current cycle data
            profile: User profile

        Returns:
            The displayed prediction after the call, None if there is none
        """
        if not has_minimum_data(current_data):
            return self.prediction
        return await self._fetch(current_data, profile)

    async def _fetch(self, current_data: CycleData, profile: UserProfile) -> Optional[Prediction]:
        # Another load may have started a fetch while the cache was being read
        if self._fetching:
            return self.prediction
        self._fetching = True
        self.loading = True
        self.error = None
        self._notify()

        try:
            result = await asyncio.to_thread(
                self.client.get_prediction, current_data, profile, self.clock()
            )
            if not await asyncio.to_thread(self.store.set_cached_prediction, result):
                logger.warning("Could not persist new prediction", extra={
                    "user_id": self.store.user_id
                })
            self.prediction = result
            logger.info("New prediction cached", extra={
                "user_id": self.store.user_id,
                "data_hash": result.data_hash
            })
        except PredictionError as e:
            logger.error("Prediction failed", extra={
                "user_id": self.store.user_id,
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            self.error = str(e) or "Could not generate prediction"
        except Exception:
            log_exception(logger, "Unexpected prediction failure", extra={
                "user_id": self.store.user_id
            })
            self.error = "Could not generate prediction"
        finally:
            self.loading = False
            self._fetching = False
            self._notify()

        return self.prediction
