"""
Centralized client initialization module.

This module provides lazy-loaded shared clients and per-user services.
"""
from cycle_tracker.utils.dynamo import get_dynamo
from cycle_tracker.utils.ssm import get_ssm
from cycle_tracker.utils.prediction import PredictionClient
from cycle_tracker.services.storage import EntryStore, PinStore
from cycle_tracker.services.tracker import CycleTracker
from cycle_tracker.services.prediction_cache import PredictionCache

# Initialize shared clients (lazy loading)
_prediction_client = None


def get_prediction_client() -> PredictionClient:
    """Get or create prediction service client."""
    global _prediction_client
    if _prediction_client is None:
        _prediction_client = PredictionClient()
    return _prediction_client


def get_stores(user_id: str):
    """Get the entry store and PIN store for a user."""
    pin_store = PinStore(user_id, ssm=get_ssm())
    store = EntryStore(user_id, dynamo=get_dynamo(), pin_store=pin_store)
    return store, pin_store


def get_tracker(user_id: str) -> CycleTracker:
    """Get a cycle tracker for a user."""
    store, pin_store = get_stores(user_id)
    return CycleTracker(store, pin_store)


def get_prediction_cache(user_id: str) -> PredictionCache:
    """Get a prediction cache controller for a user."""
    store, _ = get_stores(user_id)
    return PredictionCache(store, get_prediction_client())
