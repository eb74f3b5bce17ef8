"""Event recording for reconcile outcomes."""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


@dataclass
class Event:
    """Something that happened to an object."""

    object_key: str
    reason: str
    message: str
    event_type: str = EVENT_TYPE_NORMAL
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventRecorder:
    """Keeps the most recent events in a bounded buffer."""

    def __init__(self, max_events: int = 1000):
        self._events: deque[Event] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def record(
        self, object_key: str, reason: str, message: str, event_type: str = EVENT_TYPE_NORMAL
    ) -> Event:
        event = Event(object_key=object_key, reason=reason, message=message, event_type=event_type)
        with self._lock:
            self._events.append(event)
        log = logger.warning if event_type == EVENT_TYPE_WARNING else logger.info
        log(f"Event {reason} on {object_key}: {message}")
        return event

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def for_object(self, object_key: str) -> list[Event]:
        return [event for event in self.events if event.object_key == object_key]
