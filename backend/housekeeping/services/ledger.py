"""
History ledger

Append-only cleaning records plus a per-cleaner assignment history.
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from housekeeping.models.domain import AssignedBy, CleaningHistoryRecord, RoomHistoryEntry

logger = logging.getLogger(__name__)


class HistoryLedger:

    def __init__(self):
        self._cleaning: List[CleaningHistoryRecord] = []
        self._room_history: Dict[str, List[RoomHistoryEntry]] = {}

    def record_history(
        self,
        cleaner_id: str,
        room_number: str,
        assigned_by: AssignedBy,
        timestamp: datetime,
    ) -> bool:
        """
        Remember that cleaner_id was linked to room_number.

        At most one entry per (cleaner, room number); the first one wins.
        Returns True when a new entry was written.
        """
        entries = self._room_history.setdefault(cleaner_id, [])
        if any(entry.room_number == room_number for entry in entries):
            return False
        entries.append(RoomHistoryEntry(room_number, assigned_by, timestamp))
        return True

    def record_completion(self, record: CleaningHistoryRecord) -> None:
        self._cleaning.append(record)
        logger.info(
            f"Room {record.room_number} cleaned by {record.housekeeper_name} "
            f"in {record.duration_seconds}s"
        )

    def cleaning_history(self, housekeeper_id: Optional[str] = None) -> List[CleaningHistoryRecord]:
        """Completed cleanings, newest end time first."""
        records = [
            r for r in self._cleaning
            if housekeeper_id is None or r.housekeeper_id == housekeeper_id
        ]
        return sorted(records, key=lambda r: r.end_time, reverse=True)

    def room_history(self, cleaner_id: str) -> List[RoomHistoryEntry]:
        """Rooms ever linked to the cleaner, newest first."""
        entries = self._room_history.get(cleaner_id, [])
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def all_room_history(self) -> Dict[str, List[RoomHistoryEntry]]:
        return {cid: list(entries) for cid, entries in self._room_history.items()}

    def restore(
        self,
        records: Iterable[CleaningHistoryRecord],
        room_history: Dict[str, List[RoomHistoryEntry]],
    ) -> None:
        self._cleaning = list(records)
        self._room_history = {cid: list(entries) for cid, entries in room_history.items()}
