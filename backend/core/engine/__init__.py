"""
core/engine - core engine components

- event_bus: in-memory publish/subscribe
- state_machine: status transition validation

Usage:
    >>> from core.engine import event_bus, StateMachine
"""
from core.engine.event_bus import (
    EventHandler,
    Event,
    PublishResult,
    EventBus,
    event_bus,
)
from core.engine.state_machine import (
    StateTransition,
    StateMachineConfig,
    StateMachine,
)

__all__ = [
    "EventHandler",
    "Event",
    "PublishResult",
    "EventBus",
    "event_bus",
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
