"""
Session tracker

Per-housekeeper room selection and session start, plus the category each room
card currently has expanded. Elapsed times are always derived from stored
start times at read time.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from housekeeping.models.domain import Room

logger = logging.getLogger(__name__)


@dataclass
class HousekeeperSession:
    housekeeper_id: str
    selected_room_ids: List[str] = field(default_factory=list)
    started_at: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            "housekeeper_id": self.housekeeper_id,
            "selected_room_ids": list(self.selected_room_ids),
            "started_at": self.started_at.isoformat() if self.started_at else None,
        }


def seconds_between(start: Optional[datetime], now: datetime) -> Optional[int]:
    if start is None:
        return None
    return max(0, int((now - start).total_seconds()))


class SessionTracker:

    def __init__(self):
        self._sessions: Dict[str, HousekeeperSession] = {}
        self._active_views: Dict[str, str] = {}

    # ---------- selection ----------

    def session(self, housekeeper_id: str) -> HousekeeperSession:
        return self._sessions.setdefault(housekeeper_id, HousekeeperSession(housekeeper_id))

    def peek(self, housekeeper_id: str) -> HousekeeperSession:
        """Read-only view; does not create an entry."""
        return self._sessions.get(housekeeper_id) or HousekeeperSession(housekeeper_id)

    def selected(self, housekeeper_id: str) -> List[str]:
        return list(self.peek(housekeeper_id).selected_room_ids)

    def is_selected(self, housekeeper_id: str, room_id: str) -> bool:
        return room_id in self.peek(housekeeper_id).selected_room_ids

    def select(self, housekeeper_id: str, room_id: str) -> bool:
        """Returns True when the room was not selected before."""
        session = self.session(housekeeper_id)
        if room_id in session.selected_room_ids:
            return False
        session.selected_room_ids.append(room_id)
        return True

    def deselect(self, housekeeper_id: str, room_id: str) -> bool:
        session = self._sessions.get(housekeeper_id)
        if session is None or room_id not in session.selected_room_ids:
            return False
        session.selected_room_ids.remove(room_id)
        return True

    def holders_of(self, room_id: str) -> List[str]:
        return [
            hk_id for hk_id, session in self._sessions.items()
            if room_id in session.selected_room_ids
        ]

    def release_room(self, room_id: str) -> List[str]:
        """Drop the room from every selection; returns the housekeepers it was removed from."""
        holders = self.holders_of(room_id)
        for hk_id in holders:
            self._sessions[hk_id].selected_room_ids.remove(room_id)
        self._active_views.pop(room_id, None)
        return holders

    # ---------- session clock ----------

    def start(self, housekeeper_id: str, now: datetime) -> bool:
        session = self.session(housekeeper_id)
        if session.started_at is not None:
            return False
        session.started_at = now
        logger.info(f"Session started for {housekeeper_id}")
        return True

    def stop_if_idle(self, housekeeper_id: str) -> bool:
        """Stop the session once nothing is selected. Returns True if it was running."""
        session = self._sessions.get(housekeeper_id)
        if session is None or session.selected_room_ids or session.started_at is None:
            return False
        session.started_at = None
        logger.info(f"Session stopped for {housekeeper_id}")
        return True

    def elapsed(self, housekeeper_id: str, now: datetime) -> Optional[int]:
        return seconds_between(self.peek(housekeeper_id).started_at, now)

    @staticmethod
    def room_elapsed(room: Room, now: datetime) -> Optional[int]:
        return seconds_between(room.session_start_time, now)

    # ---------- active category view ----------

    def active_view(self, room_id: str) -> Optional[str]:
        return self._active_views.get(room_id)

    def toggle_view(self, room_id: str, category: str) -> Optional[str]:
        """Expand category on the room card; toggling the open one collapses it."""
        if self._active_views.get(room_id) == category:
            del self._active_views[room_id]
            return None
        self._active_views[room_id] = category
        return category

    # ---------- persistence ----------

    def sessions(self) -> List[HousekeeperSession]:
        return [
            HousekeeperSession(s.housekeeper_id, list(s.selected_room_ids), s.started_at)
            for s in self._sessions.values()
        ]

    def active_views(self) -> Dict[str, str]:
        return dict(self._active_views)

    def restore(self, sessions: Iterable[HousekeeperSession], active_views: Dict[str, str]) -> None:
        self._sessions = {s.housekeeper_id: s for s in sessions}
        self._active_views = dict(active_views)
