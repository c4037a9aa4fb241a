"""
Event handlers
Subscribe to committed domain events: audit logging and state autosave.
"""
import logging
from typing import Callable, Optional

from core.engine.event_bus import Event, EventBus, event_bus
from housekeeping.models.events import EventType

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("housekeeping.audit")


class EventHandlers:
    """
    Handler set bound to one store.

    Args:
        store_provider: returns the HousekeepingStore to persist; injectable for tests
    """

    def __init__(self, store_provider: Callable):
        self._store_provider = store_provider
        self._registered = False
        self._bus: Optional[EventBus] = None

    def handle_audit(self, event: Event) -> None:
        audit_logger.info(f"{event.event_type} {event.data}")

    def handle_room_abandoned(self, event: Event) -> None:
        data = event.data
        logger.warning(
            f"Room {data.get('room_number')} abandoned after {data.get('time_spent_seconds')}s: "
            f"{data.get('note')}"
        )

    def handle_persist(self, event: Event) -> None:
        """Save the full store state after every committed mutation."""
        store = self._store_provider()
        if store is None:
            return
        try:
            store.save()
        except Exception as e:
            logger.error(f"Failed to persist state after {event.event_type}: {e}", exc_info=True)

    def register_handlers(self, event_bus_instance: Optional[EventBus] = None) -> None:
        if self._registered:
            return

        bus = event_bus_instance or event_bus
        bus.subscribe(EventBus.WILDCARD, self.handle_audit)
        bus.subscribe(EventBus.WILDCARD, self.handle_persist)
        bus.subscribe(EventType.ROOM_ABANDONED.value, self.handle_room_abandoned)

        self._bus = bus
        self._registered = True
        logger.info("Event handlers registered successfully")

    def unregister_handlers(self) -> None:
        """Detach from the bus (shutdown and tests)."""
        if not self._registered:
            return
        bus = self._bus
        bus.unsubscribe(EventBus.WILDCARD, self.handle_audit)
        bus.unsubscribe(EventBus.WILDCARD, self.handle_persist)
        bus.unsubscribe(EventType.ROOM_ABANDONED.value, self.handle_room_abandoned)

        self._registered = False
        logger.info("Event handlers unregistered")
