# Domain Models
from housekeeping.models.domain import (
    RoomStatus, AssignedBy, ActorRole, TaskDefinition, ChecklistItem, Room,
    Cleaner, CleaningHistoryRecord, RoomHistoryEntry, ExceptionMessage,
    PendingProposal, Actor
)

__all__ = [
    'RoomStatus', 'AssignedBy', 'ActorRole', 'TaskDefinition', 'ChecklistItem', 'Room',
    'Cleaner', 'CleaningHistoryRecord', 'RoomHistoryEntry', 'ExceptionMessage',
    'PendingProposal', 'Actor'
]
