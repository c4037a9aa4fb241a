"""
HousekeepingStore - the single authoritative in-process store

All mutations run under one re-entrant lock and publish their domain events
only after they succeed. Readers get deep copies taken under the same lock,
so nobody ever observes half of a batch.
"""
import copy
import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.engine.event_bus import Event, event_bus
from housekeeping.models.domain import (
    Actor,
    ChecklistItem,
    Cleaner,
    CleaningHistoryRecord,
    ExceptionMessage,
    PendingProposal,
    Room,
    RoomHistoryEntry,
    RoomStatus,
)
from housekeeping.services.assignment import AssignmentEngine
from housekeeping.services.catalog import TaskCatalog
from housekeeping.services.directory import CleanerDirectory
from housekeeping.services.ledger import HistoryLedger
from housekeeping.services.messages import MessageChannel, format_elapsed_long
from housekeeping.services.persistence import PersistedState, StateRepository
from housekeeping.services.registry import RoomRegistry
from housekeeping.services.sessions import SessionTracker

logger = logging.getLogger(__name__)


class HousekeepingStore:
    """
    Owns every workflow component.

    Args:
        catalog: task catalog; a default one is built when omitted
        clock: returns "now"; all timers derive from it
        event_publisher: receives committed events (defaults to the global event bus)
        repository: optional load/save hook
        session_max_age_hours: restored session starts older than this are dropped
    """

    def __init__(
        self,
        catalog: Optional[TaskCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
        event_publisher: Optional[Callable[[Event], Any]] = None,
        repository: Optional[StateRepository] = None,
        session_max_age_hours: int = 24,
    ):
        self._lock = threading.RLock()
        self._clock = clock or datetime.now
        self._publish_event = event_publisher or event_bus.publish
        self._pending: List[Event] = []
        self.repository = repository
        self.session_max_age = timedelta(hours=session_max_age_hours)

        self.catalog = catalog or TaskCatalog()
        self.registry = RoomRegistry(self.catalog)
        self.directory = CleanerDirectory()
        self.ledger = HistoryLedger()
        self.messages = MessageChannel()
        self.sessions = SessionTracker()
        self.engine = AssignmentEngine(
            catalog=self.catalog,
            registry=self.registry,
            directory=self.directory,
            ledger=self.ledger,
            messages=self.messages,
            sessions=self.sessions,
            clock=self._clock,
            event_publisher=self._pending.append,
        )

    def now(self) -> datetime:
        return self._clock()

    def _mutate(self, operation: Callable, *args, **kwargs):
        with self._lock:
            try:
                result = operation(*args, **kwargs)
            finally:
                events = list(self._pending)
                self._pending.clear()
            for event in events:
                self._publish_event(event)
            return copy.deepcopy(result)

    # ---------- mutations ----------

    def add_room(self, room_id: str, number: str, room_type: str, floor: int,
                 status: RoomStatus = RoomStatus.CHECKOUT) -> Room:
        return self._mutate(self.engine.add_room, room_id, number, room_type, floor, status)

    def add_adhoc_task(self, room_id: str, label: str, category: str) -> ChecklistItem:
        return self._mutate(self.engine.add_adhoc_task, room_id, label, category)

    def ingest_catalog(self, feed: Mapping[str, Any]) -> int:
        return self._mutate(self.engine.ingest_catalog, feed)

    def create_cleaner(self, profile: Mapping[str, Any]) -> Cleaner:
        return self._mutate(self.engine.create_cleaner, profile)

    def update_cleaner(self, cleaner_id: str, profile: Mapping[str, Any]) -> Cleaner:
        return self._mutate(self.engine.update_cleaner, cleaner_id, profile)

    def deactivate_cleaner(self, cleaner_id: str):
        return self._mutate(self.engine.deactivate_cleaner, cleaner_id)

    def propose(self, room_id: str, cleaner_id: str,
                expected_status: Optional[RoomStatus] = None) -> PendingProposal:
        return self._mutate(self.engine.propose, room_id, cleaner_id, expected_status)

    def accept(self, room_id: str, actor: Optional[Actor] = None) -> Room:
        return self._mutate(self.engine.accept, room_id, actor)

    def reject(self, room_id: str, actor: Optional[Actor] = None) -> PendingProposal:
        return self._mutate(self.engine.reject, room_id, actor)

    def reassign_from_message(self, message_id: str, cleaner_id: str) -> PendingProposal:
        return self._mutate(self.engine.reassign_from_message, message_id, cleaner_id)

    def bulk_assign(self, room_ids: List[str], cleaner_id: str) -> List[Room]:
        return self._mutate(self.engine.bulk_assign, room_ids, cleaner_id)

    def guest_checkout(self, room_id: str, expected_status: Optional[RoomStatus] = None) -> Room:
        return self._mutate(self.engine.guest_checkout, room_id, expected_status)

    def select_room(self, actor: Actor, room_id: str) -> List[str]:
        return self._mutate(self.engine.select_room, actor, room_id)

    def deselect_room(self, actor: Actor, room_id: str, note: Optional[str] = None) -> Optional[ExceptionMessage]:
        return self._mutate(self.engine.deselect_room, actor, room_id, note)

    def proceed(self, actor: Actor) -> List[Room]:
        return self._mutate(self.engine.proceed, actor)

    def toggle_task(self, actor: Actor, room_id: str, task_id: str) -> ChecklistItem:
        return self._mutate(self.engine.toggle_task, actor, room_id, task_id)

    def toggle_view(self, actor: Actor, room_id: str, category: str) -> Optional[str]:
        return self._mutate(self.engine.toggle_view, actor, room_id, category)

    def abandon(self, actor: Actor, room_id: str, note: Optional[str] = None) -> ExceptionMessage:
        return self._mutate(self.engine.abandon, actor, room_id, note)

    def finish(self, actor: Actor, room_id: str) -> CleaningHistoryRecord:
        return self._mutate(self.engine.finish, actor, room_id)

    # ---------- reads ----------

    def room(self, room_id: str) -> Room:
        with self._lock:
            return copy.deepcopy(self.registry.get(room_id))

    def rooms(self, fragment: str = "", status: Optional[RoomStatus] = None) -> List[Room]:
        with self._lock:
            return copy.deepcopy(self.registry.search(fragment, status))

    def _room_view(self, room: Room, now: datetime) -> Dict[str, Any]:
        completed, total = self.registry.progress(room)
        proposal = self.engine.proposal(room.id)
        view = room.to_dict()
        view.update({
            "assigned_cleaner_name": self.directory.display_name(room.assigned_cleaner_id),
            "visible_tasks": [t.to_dict() for t in self.registry.visible_tasks(room)],
            "applicable_categories": self.registry.applicable_categories(room),
            "progress": {"completed": completed, "total": total},
            "is_fully_clean": total > 0 and completed == total,
            "elapsed_seconds": self.sessions.room_elapsed(room, now),
            "active_category": self.sessions.active_view(room.id),
            "pending_proposal": proposal.to_dict() if proposal else None,
            "last_rejected_cleaner_id": self.engine.last_rejected(room.id),
        })
        return view

    def room_view(self, room_id: str) -> Dict[str, Any]:
        """Room with derived fields resolved: cleaner name, visible tasks, progress, timer."""
        with self._lock:
            return self._room_view(self.registry.get(room_id), self.now())

    def room_views(self, fragment: str = "", status: Optional[RoomStatus] = None) -> List[Dict[str, Any]]:
        with self._lock:
            now = self.now()
            return [self._room_view(r, now) for r in self.registry.search(fragment, status)]

    def visible_tasks(self, room_id: str) -> List[ChecklistItem]:
        with self._lock:
            return self.registry.visible_tasks(self.registry.get(room_id))

    def progress(self, room_id: str):
        with self._lock:
            return self.registry.progress(self.registry.get(room_id))

    def is_fully_clean(self, room_id: str) -> bool:
        with self._lock:
            return self.registry.is_fully_clean(self.registry.get(room_id))

    def status_counts(self) -> Dict[str, int]:
        with self._lock:
            return self.registry.status_counts()

    def cleaner(self, cleaner_id: str) -> Cleaner:
        with self._lock:
            return copy.deepcopy(self.directory.get(cleaner_id))

    def cleaners(self, active_only: bool = False) -> List[Cleaner]:
        with self._lock:
            return copy.deepcopy(self.directory.list(active_only))

    def find_cleaner_by_name(self, name: str) -> Optional[Cleaner]:
        with self._lock:
            return copy.deepcopy(self.directory.find_by_name(name))

    def active_cleaners(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                {
                    "cleaner": cleaner.to_dict(),
                    "rooms": [
                        {"id": r.id, "number": r.number, "status": r.status.value}
                        for r in rooms
                    ],
                }
                for cleaner, rooms in self.engine.active_cleaners()
            ]

    def reassignment_options(self, room_id: str) -> List[Cleaner]:
        with self._lock:
            return copy.deepcopy(self.engine.reassignment_options(room_id))

    def proposals(self) -> List[PendingProposal]:
        with self._lock:
            return copy.deepcopy(self.engine.proposals())

    def message_views(self) -> List[Dict[str, Any]]:
        """FIFO messages with the derived actionable flag."""
        with self._lock:
            return [
                dict(m.to_dict(), actionable=self.messages.is_actionable(m, self.registry))
                for m in self.messages.list()
            ]

    def cleaning_history(self, housekeeper_id: Optional[str] = None) -> List[CleaningHistoryRecord]:
        with self._lock:
            return copy.deepcopy(self.ledger.cleaning_history(housekeeper_id))

    def room_history(self, cleaner_id: str) -> List[RoomHistoryEntry]:
        with self._lock:
            return copy.deepcopy(self.ledger.room_history(cleaner_id))

    def session_view(self, housekeeper_id: str) -> Dict[str, Any]:
        with self._lock:
            session = self.sessions.peek(housekeeper_id)
            elapsed = self.sessions.elapsed(housekeeper_id, self.now())
            return {
                "housekeeper_id": housekeeper_id,
                "selected_room_ids": list(session.selected_room_ids),
                "started_at": session.started_at.isoformat() if session.started_at else None,
                "session_elapsed_seconds": elapsed,
                "session_elapsed": format_elapsed_long(elapsed) if elapsed is not None else None,
            }

    def catalog_view(self) -> Dict[str, Any]:
        with self._lock:
            return self.catalog.to_dict()

    # ---------- persistence ----------

    def export_state(self) -> PersistedState:
        with self._lock:
            return copy.deepcopy(PersistedState(
                catalog_feed=self.catalog.feed,
                catalog_version=self.catalog.version,
                rooms=self.registry.all(),
                cleaners=self.directory.list(),
                messages=self.messages.list(),
                cleaning_history=self.ledger.cleaning_history(),
                room_history=self.ledger.all_room_history(),
                sessions=self.sessions.sessions(),
                active_views=self.sessions.active_views(),
                proposals=self.engine.proposals(),
                last_rejected={
                    r.id: self.engine.last_rejected(r.id)
                    for r in self.registry.all()
                    if self.engine.last_rejected(r.id)
                },
            ))

    def restore_state(self, state: PersistedState) -> None:
        """Replace the whole store content; stale session starts are discarded."""
        state = copy.deepcopy(state)
        with self._lock:
            now = self.now()
            self.catalog.restore(state.catalog_feed, state.catalog_version)
            self.registry.clear()
            for room in state.rooms:
                self.registry.put(room)
            self.directory.clear()
            for cleaner in state.cleaners:
                self.directory.put(cleaner)
            self.messages.restore(state.messages)
            self.ledger.restore(state.cleaning_history, state.room_history)
            for session in state.sessions:
                if session.started_at is not None and now - session.started_at > self.session_max_age:
                    logger.info(f"Discarding stale session start for {session.housekeeper_id}")
                    session.started_at = None
            self.sessions.restore(state.sessions, state.active_views)
            self.engine.restore(state.proposals, state.last_rejected)
        logger.info(f"Store restored: {len(state.rooms)} rooms, {len(state.cleaners)} cleaners")

    def is_empty(self) -> bool:
        with self._lock:
            return not self.registry.all() and not self.directory.list()

    def save(self) -> bool:
        """Persist through the configured repository. Returns False when none is configured."""
        if self.repository is None:
            return False
        with self._lock:
            self.repository.save(self.export_state())
        return True

    def load(self) -> bool:
        if self.repository is None:
            return False
        state = self.repository.load()
        if state is None:
            return False
        self.restore_state(state)
        return True
