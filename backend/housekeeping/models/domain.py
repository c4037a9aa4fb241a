"""
Housekeeping domain model

Plain dataclasses owned by the HousekeepingStore. Cleaner id is the only
foreign key between objects; display names are resolved when rendering.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.engine.state_machine import StateMachine, StateMachineConfig, StateTransition


class RoomStatus(str, Enum):
    """Room lifecycle status"""
    CHECKOUT = "checkout"          # guest left, waiting for a cleaner
    ASSIGNED = "assigned"          # a cleaner accepted the room
    IN_CLEANING = "in_cleaning"    # cleaning session running
    AVAILABLE = "available"        # clean, ready for the next guest


class AssignedBy(str, Enum):
    """Who linked a cleaner to a room"""
    MANAGER = "manager"
    HOUSEKEEPER = "housekeeper"


class ActorRole(str, Enum):
    MANAGER = "manager"
    HOUSEKEEPER = "housekeeper"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class TaskDefinition:
    """A catalog task; order inside a category is the completion order."""
    task_id: str
    label: str
    category: str
    icon: str = "clipboard-check"


@dataclass
class ChecklistItem:
    task_id: str
    label: str
    category: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Room:
    id: str
    number: str
    room_type: str
    floor: int
    status: RoomStatus = RoomStatus.CHECKOUT
    assigned_cleaner_id: Optional[str] = None
    checklist: List[ChecklistItem] = field(default_factory=list)
    session_start_time: Optional[datetime] = None

    def find_item(self, task_id: str) -> Optional[ChecklistItem]:
        for item in self.checklist:
            if item.task_id == task_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "room_type": self.room_type,
            "floor": self.floor,
            "status": self.status.value,
            "assigned_cleaner_id": self.assigned_cleaner_id,
            "checklist": [item.to_dict() for item in self.checklist],
            "session_start_time": _iso(self.session_start_time),
        }


@dataclass
class Cleaner:
    id: str
    name: str
    phone: str
    email: str = ""
    nic: str = ""
    address: str = ""
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CleaningHistoryRecord:
    """Immutable snapshot of one completed cleaning."""
    id: str
    room_id: str
    room_number: str
    room_type: str
    floor: int
    cleaning_date: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int
    completed_tasks: Tuple[ChecklistItem, ...]
    housekeeper_id: str
    housekeeper_name: str
    status: str = "completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "room_id": self.room_id,
            "room_number": self.room_number,
            "room_type": self.room_type,
            "floor": self.floor,
            "cleaning_date": self.cleaning_date,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "duration_seconds": self.duration_seconds,
            "status": self.status,
            "completed_tasks": [item.to_dict() for item in self.completed_tasks],
            "housekeeper_id": self.housekeeper_id,
            "housekeeper_name": self.housekeeper_name,
        }


@dataclass(frozen=True)
class RoomHistoryEntry:
    room_number: str
    assigned_by: AssignedBy
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_number": self.room_number,
            "assigned_by": self.assigned_by.value,
            "timestamp": _iso(self.timestamp),
        }


@dataclass(frozen=True)
class ExceptionMessage:
    """A housekeeper gave up on a room mid-clean."""
    id: str
    room_number: str
    cleaner_name: str
    time_spent: str
    time_spent_seconds: int
    note: str
    timestamp: datetime
    cleaner_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "room_number": self.room_number,
            "cleaner_id": self.cleaner_id,
            "cleaner_name": self.cleaner_name,
            "time_spent": self.time_spent,
            "time_spent_seconds": self.time_spent_seconds,
            "note": self.note,
            "timestamp": _iso(self.timestamp),
        }


@dataclass
class PendingProposal:
    """Manager proposed a cleaner; waiting for the cleaner's yes/no."""
    room_id: str
    cleaner_id: str
    is_reassignment: bool
    expected_status: RoomStatus
    proposed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "cleaner_id": self.cleaner_id,
            "is_reassignment": self.is_reassignment,
            "expected_status": self.expected_status.value,
            "proposed_at": _iso(self.proposed_at),
        }


@dataclass(frozen=True)
class Actor:
    """Identity supplied by the authentication context."""
    id: str
    name: str
    role: ActorRole


# Triggers
ACCEPT_ASSIGNMENT = "accept_assignment"
BULK_ASSIGN = "bulk_assign"
START_CLEANING = "start_cleaning"
UNASSIGN = "unassign"
ABANDON = "abandon"
FINISH = "finish"
GUEST_CHECKOUT = "guest_checkout"


ROOM_TRANSITIONS = [
    StateTransition(RoomStatus.CHECKOUT.value, RoomStatus.ASSIGNED.value, ACCEPT_ASSIGNMENT),
    StateTransition(RoomStatus.CHECKOUT.value, RoomStatus.ASSIGNED.value, BULK_ASSIGN),
    StateTransition(RoomStatus.CHECKOUT.value, RoomStatus.IN_CLEANING.value, START_CLEANING),
    StateTransition(RoomStatus.ASSIGNED.value, RoomStatus.IN_CLEANING.value, START_CLEANING),
    StateTransition(RoomStatus.ASSIGNED.value, RoomStatus.CHECKOUT.value, UNASSIGN),
    StateTransition(RoomStatus.IN_CLEANING.value, RoomStatus.CHECKOUT.value, UNASSIGN),
    StateTransition(RoomStatus.IN_CLEANING.value, RoomStatus.CHECKOUT.value, ABANDON),
    StateTransition(RoomStatus.IN_CLEANING.value, RoomStatus.AVAILABLE.value, FINISH),
    StateTransition(RoomStatus.AVAILABLE.value, RoomStatus.CHECKOUT.value, GUEST_CHECKOUT),
]


def create_room_state_machine(initial_status: RoomStatus) -> StateMachine:
    return StateMachine(
        config=StateMachineConfig(
            name="Room",
            states=[s.value for s in RoomStatus],
            transitions=ROOM_TRANSITIONS,
            initial_state=initial_status.value,
        )
    )


__all__ = [
    "RoomStatus",
    "AssignedBy",
    "ActorRole",
    "TaskDefinition",
    "ChecklistItem",
    "Room",
    "Cleaner",
    "CleaningHistoryRecord",
    "RoomHistoryEntry",
    "ExceptionMessage",
    "PendingProposal",
    "Actor",
    "create_room_state_machine",
]
