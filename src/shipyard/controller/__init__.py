"""
Reconcile Driver Package

Loads release snapshots from the object store, runs the strategy executor and
applies its patches, with concurrent per-release workers and event recording.
"""

from .events import EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING, Event, EventRecorder
from .strategy_controller import RETRYABLE_ERRORS, StrategyController, SyncResult, split_key

__all__ = [
    "StrategyController",
    "SyncResult",
    "RETRYABLE_ERRORS",
    "split_key",
    "Event",
    "EventRecorder",
    "EVENT_TYPE_NORMAL",
    "EVENT_TYPE_WARNING",
]
