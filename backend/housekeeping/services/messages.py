"""
Exception message channel (housekeeper -> manager)
"""
import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from housekeeping.errors import NotFound
from housekeeping.models.domain import ExceptionMessage, RoomStatus
from housekeeping.services.registry import RoomRegistry

DEFAULT_ABANDON_NOTE = "Unable to finish this room"


def format_elapsed(seconds: int) -> str:
    """MM:SS; minutes are not capped at 59."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_elapsed_long(seconds: int) -> str:
    """HH:MM:SS for the housekeeper session timer."""
    seconds = max(0, int(seconds))
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}:{seconds % 60:02d}"


class MessageChannel:
    """FIFO list of exception messages; messages are never deleted."""

    def __init__(self):
        self._messages: List[ExceptionMessage] = []

    def post(
        self,
        room_number: str,
        cleaner_id: Optional[str],
        cleaner_name: str,
        time_spent_seconds: int,
        note: Optional[str],
        timestamp: datetime,
    ) -> ExceptionMessage:
        message = ExceptionMessage(
            id=f"removal-{int(timestamp.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}",
            room_number=room_number,
            cleaner_id=cleaner_id,
            cleaner_name=cleaner_name,
            time_spent=format_elapsed(time_spent_seconds),
            time_spent_seconds=time_spent_seconds,
            note=(note or "").strip() or DEFAULT_ABANDON_NOTE,
            timestamp=timestamp,
        )
        self._messages.append(message)
        return message

    def list(self) -> List[ExceptionMessage]:
        return list(self._messages)

    def get(self, message_id: str) -> ExceptionMessage:
        for message in self._messages:
            if message.id == message_id:
                return message
        raise NotFound("Message", message_id)

    @staticmethod
    def is_actionable(message: ExceptionMessage, registry: RoomRegistry) -> bool:
        """A message can be acted on while its room is still waiting in checkout."""
        room = registry.find_by_number(message.room_number)
        return room is not None and room.status == RoomStatus.CHECKOUT

    def restore(self, messages: Iterable[ExceptionMessage]) -> None:
        self._messages = list(messages)
