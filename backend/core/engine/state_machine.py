"""
core/engine/state_machine.py

State machine engine - validates status transitions for a single entity.
"""
from typing import Dict, List
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    State transition definition.

    Attributes:
        from_state: Source state
        to_state: Target state
        trigger: Triggering action name
    """

    from_state: str
    to_state: str
    trigger: str


@dataclass
class StateMachineConfig:
    """
    State machine configuration.

    Attributes:
        name: Machine name (usually the entity type)
        states: All known states
        transitions: Allowed transitions
        initial_state: Starting state
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str


class StateMachine:
    """
    State machine engine.

    Transitions are keyed by (from_state, trigger); a trigger leads to
    exactly one target state.

    Example:
        >>> machine = StateMachine(
        ...     config=StateMachineConfig(
        ...         name="Room",
        ...         states=["checkout", "assigned"],
        ...         transitions=[StateTransition("checkout", "assigned", "accept")],
        ...         initial_state="checkout"
        ...     )
        ... )
        >>> if machine.can_transition_to("assigned", "accept"):
        ...     machine.transition_to("assigned", "accept")
    """

    def __init__(self, config: StateMachineConfig):
        self._config = config
        self._current_state = config.initial_state
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # (from_state, trigger) -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        return self._current_state

    def can_transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Check whether the machine may move to target_state via trigger.

        Args:
            target_state: Desired state
            trigger: Triggering action

        Returns:
            True if the transition is allowed
        """
        if target_state not in self._config.states:
            return False

        transition = self._transition_map.get(self._current_state, {}).get(trigger)
        return transition is not None and transition.to_state == target_state

    def transition_to(self, target_state: str, trigger: str) -> bool:
        """
        Perform a transition.

        Returns:
            True if the transition happened, False if it was rejected
        """
        if not self.can_transition_to(target_state, trigger):
            logger.warning(
                f"Invalid transition: {self._current_state} -> {target_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = target_state
        logger.info(f"{self._config.name} transition: {previous_state} -> {target_state} (trigger: {trigger})")
        return True


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
