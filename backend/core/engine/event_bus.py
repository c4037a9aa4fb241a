"""
core/engine/event_bus.py

In-memory publish/subscribe event bus.
Handlers run synchronously; a failing handler never affects the others.
"""
from typing import Callable, Dict, List, Any, Optional, Protocol, Tuple
from dataclasses import dataclass, field
from datetime import datetime
import logging
import threading
import uuid

logger = logging.getLogger(__name__)


def _generate_event_id() -> str:
    return f"{datetime.now().strftime('%Y%m%d%H%M%S')}_{uuid.uuid4().hex[:8]}"


class EventHandler(Protocol):
    def __call__(self, event: "Event") -> None:
        ...


@dataclass
class Event:
    """
    Domain event.

    Attributes:
        event_type: Event type, e.g. "room.assigned"
        timestamp: When the event happened
        data: Event payload
        source: Publishing service
        event_id: Unique event id
    """

    event_type: str
    timestamp: datetime
    data: Dict[str, Any]
    source: str = ""
    event_id: str = field(default_factory=_generate_event_id)


@dataclass
class PublishResult:
    """Outcome of publishing one event."""

    event_type: str
    subscriber_count: int
    success_count: int = 0
    failure_count: int = 0
    errors: List[Tuple[Callable, Exception]] = field(default_factory=list)


class EventBus:
    """
    Event bus - thread-safe singleton.

    Handlers subscribe by event type; "*" subscribers receive every event.
    A handler that raises is logged and counted, the rest still run.

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe("room.assigned", lambda e: print(e.data))
        >>> bus.publish(Event(event_type="room.assigned", timestamp=datetime.now(), data={}))
    """

    WILDCARD = "*"

    _instance: Optional["EventBus"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._subscriber_lock = threading.RLock()

        self._initialized = True
        logger.info("EventBus initialized")

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event type ("*" receives every event).
        Subscribing the same handler twice is a no-op.
        """
        with self._subscriber_lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.info(f"Handler {getattr(handler, '__name__', handler)} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        with self._subscriber_lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def _handlers_for(self, event_type: str) -> List[EventHandler]:
        with self._subscriber_lock:
            handlers = list(self._subscribers.get(event_type, []))
            for handler in self._subscribers.get(self.WILDCARD, []):
                if handler not in handlers:
                    handlers.append(handler)
        return handlers

    def publish(self, event: Event) -> PublishResult:
        """
        Publish an event to its subscribers and to wildcard subscribers.

        Returns:
            PublishResult with per-handler success/failure counts
        """
        handlers = self._handlers_for(event.event_type)
        result = PublishResult(event_type=event.event_type, subscriber_count=len(handlers))

        for handler in handlers:
            try:
                handler(event)
                result.success_count += 1
            except Exception as e:
                result.failure_count += 1
                result.errors.append((handler, e))
                logger.error(
                    f"Event handler {getattr(handler, '__name__', handler)} error for {event.event_type}: {e}",
                    exc_info=True,
                )

        return result

    def clear(self) -> None:
        """
        Drop all subscribers.

        Warning:
            Test use only.
        """
        with self._subscriber_lock:
            self._subscribers.clear()


event_bus = EventBus()


__all__ = [
    "EventHandler",
    "Event",
    "PublishResult",
    "EventBus",
    "event_bus",
]
