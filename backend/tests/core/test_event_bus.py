"""
core.engine.event_bus unit tests
"""
import pytest
from datetime import datetime

from core.engine.event_bus import Event, EventBus, event_bus


@pytest.fixture
def bus():
    b = EventBus()
    b.clear()
    return b


@pytest.fixture
def sample_event():
    return Event(
        event_type="room.assigned",
        timestamp=datetime.now(),
        data={"room_id": "r-101"},
        source="test"
    )


class TestEventBus:

    def test_singleton(self, bus):
        assert EventBus() is bus
        assert event_bus is bus

    def test_subscribe_and_publish(self, bus, sample_event):
        received = []
        bus.subscribe("room.assigned", received.append)

        result = bus.publish(sample_event)

        assert received == [sample_event]
        assert result.subscriber_count == 1
        assert result.success_count == 1

    def test_subscribe_is_idempotent(self, bus, sample_event):
        received = []
        bus.subscribe("room.assigned", received.append)
        bus.subscribe("room.assigned", received.append)

        bus.publish(sample_event)

        assert len(received) == 1

    def test_wildcard_receives_everything(self, bus, sample_event):
        seen = []
        bus.subscribe(EventBus.WILDCARD, lambda e: seen.append(e.event_type))

        bus.publish(sample_event)
        bus.publish(Event(event_type="room.abandoned", timestamp=datetime.now(), data={}))

        assert seen == ["room.assigned", "room.abandoned"]

    def test_handler_failure_is_isolated(self, bus, sample_event):
        received = []

        def broken(event):
            raise RuntimeError("handler down")

        bus.subscribe("room.assigned", broken)
        bus.subscribe("room.assigned", received.append)

        result = bus.publish(sample_event)

        assert received == [sample_event]
        assert result.failure_count == 1
        assert result.success_count == 1

    def test_unsubscribe(self, bus, sample_event):
        received = []
        bus.subscribe("room.assigned", received.append)
        bus.unsubscribe("room.assigned", received.append)

        bus.publish(sample_event)

        assert received == []

    def test_wildcard_and_typed_subscription_run_once(self, bus, sample_event):
        received = []
        bus.subscribe("room.assigned", received.append)
        bus.subscribe(EventBus.WILDCARD, received.append)

        result = bus.publish(sample_event)

        assert received == [sample_event]
        assert result.subscriber_count == 1

    def test_no_subscribers(self, bus, sample_event):
        result = bus.publish(sample_event)
        assert result.subscriber_count == 0
        assert result.errors == []
