"""
Domain events
Published on the event bus after a store mutation has been committed.
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any, List


class EventType(str, Enum):
    """Event types"""
    # Assignment handshake
    ASSIGNMENT_PROPOSED = "assignment.proposed"
    ASSIGNMENT_REJECTED = "assignment.rejected"
    ROOM_ASSIGNED = "room.assigned"
    ROOM_REASSIGNED = "room.reassigned"
    ROOMS_BULK_ASSIGNED = "room.bulk_assigned"

    # Cleaning lifecycle
    CLEANING_STARTED = "room.cleaning_started"
    CLEANING_FINISHED = "room.cleaning_finished"
    ROOM_ABANDONED = "room.abandoned"
    ROOM_UNASSIGNED = "room.unassigned"
    GUEST_CHECKED_OUT = "room.guest_checked_out"
    TASK_TOGGLED = "room.task_toggled"
    TASK_ADDED = "room.task_added"

    # Housekeeper sessions
    SESSION_STARTED = "session.started"
    SESSION_STOPPED = "session.stopped"
    SELECTION_CHANGED = "session.selection_changed"
    VIEW_CHANGED = "session.view_changed"

    # Directory / catalog
    CLEANER_SAVED = "cleaner.saved"
    CLEANER_DEACTIVATED = "cleaner.deactivated"
    CATALOG_UPDATED = "catalog.updated"
    ROOM_ADDED = "room.added"


@dataclass
class BaseEventData:
    """Event payload base"""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
        return result


@dataclass
class AssignmentData(BaseEventData):
    room_id: str = ""
    room_number: str = ""
    cleaner_id: str = ""
    cleaner_name: str = ""
    previous_cleaner_id: Optional[str] = None
    is_reassignment: bool = False


@dataclass
class BulkAssignmentData(BaseEventData):
    room_ids: List[str] = field(default_factory=list)
    cleaner_id: str = ""
    cleaner_name: str = ""


@dataclass
class CleaningStartedData(BaseEventData):
    housekeeper_id: str = ""
    housekeeper_name: str = ""
    room_ids: List[str] = field(default_factory=list)


@dataclass
class CleaningFinishedData(BaseEventData):
    room_id: str = ""
    room_number: str = ""
    housekeeper_id: str = ""
    housekeeper_name: str = ""
    record_id: str = ""
    duration_seconds: int = 0


@dataclass
class RoomAbandonedData(BaseEventData):
    room_id: str = ""
    room_number: str = ""
    housekeeper_id: str = ""
    message_id: str = ""
    time_spent_seconds: int = 0
    note: str = ""


@dataclass
class RoomStatusChangedData(BaseEventData):
    room_id: str = ""
    room_number: str = ""
    old_status: str = ""
    new_status: str = ""
    reason: str = ""


@dataclass
class SessionData(BaseEventData):
    housekeeper_id: str = ""
    started_at: Optional[datetime] = None
    selected_room_ids: List[str] = field(default_factory=list)


@dataclass
class TaskToggledData(BaseEventData):
    room_id: str = ""
    task_id: str = ""
    category: str = ""
    completed: bool = False


@dataclass
class RoomViewData(BaseEventData):
    room_id: str = ""
    category: Optional[str] = None
    label: str = ""


@dataclass
class CleanerData(BaseEventData):
    cleaner_id: str = ""
    cleaner_name: str = ""
    active: bool = True
    unassigned_room_ids: List[str] = field(default_factory=list)


@dataclass
class CatalogData(BaseEventData):
    version: int = 0
    categories: List[str] = field(default_factory=list)
