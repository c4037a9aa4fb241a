"""
Assignment engine

Room status state machine plus the manager / housekeeper protocols:
propose -> accept / reject -> reassign, self-selection and proceed,
abandon, finish, bulk assign and cleaner deactivation.

Every operation validates first and mutates second, so an exception always
leaves the components untouched. Locking is the caller's job (HousekeepingStore).
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.engine.event_bus import Event, event_bus
from housekeeping.errors import (
    Forbidden,
    NotFound,
    PreconditionFailed,
    StateConflict,
    ValidationFailed,
)
from housekeeping.models.domain import (
    ABANDON,
    ACCEPT_ASSIGNMENT,
    BULK_ASSIGN,
    FINISH,
    GUEST_CHECKOUT,
    START_CLEANING,
    UNASSIGN,
    Actor,
    ActorRole,
    AssignedBy,
    ChecklistItem,
    Cleaner,
    CleaningHistoryRecord,
    ExceptionMessage,
    PendingProposal,
    Room,
    RoomStatus,
    create_room_state_machine,
)
from housekeeping.models.events import (
    AssignmentData,
    BaseEventData,
    BulkAssignmentData,
    CatalogData,
    CleanerData,
    CleaningFinishedData,
    CleaningStartedData,
    EventType,
    RoomAbandonedData,
    RoomStatusChangedData,
    RoomViewData,
    SessionData,
    TaskToggledData,
)
from housekeeping.services.catalog import TaskCatalog
from housekeeping.services.directory import CleanerDirectory
from housekeeping.services.ledger import HistoryLedger
from housekeeping.services.messages import MessageChannel
from housekeeping.services.registry import RoomRegistry
from housekeeping.services.sessions import SessionTracker, seconds_between

logger = logging.getLogger(__name__)


class AssignmentEngine:
    """
    Workflow operations over the registry, directory, ledger, channel and sessions.

    Args:
        clock: returns the current time; injected so tests control timers
        event_publisher: receives one Event per state change
    """

    def __init__(
        self,
        catalog: TaskCatalog,
        registry: RoomRegistry,
        directory: CleanerDirectory,
        ledger: HistoryLedger,
        messages: MessageChannel,
        sessions: SessionTracker,
        clock: Optional[Callable[[], datetime]] = None,
        event_publisher: Optional[Callable[[Event], Any]] = None,
    ):
        self.catalog = catalog
        self.registry = registry
        self.directory = directory
        self.ledger = ledger
        self.messages = messages
        self.sessions = sessions
        self._clock = clock or datetime.now
        self._publish_event = event_publisher or event_bus.publish
        self._proposals: Dict[str, PendingProposal] = {}
        self._last_rejected: Dict[str, str] = {}

    # ---------- helpers ----------

    def now(self) -> datetime:
        return self._clock()

    def _emit(self, event_type: EventType, data: BaseEventData) -> None:
        self._publish_event(Event(
            event_type=event_type.value,
            timestamp=data.timestamp,
            data=data.to_dict(),
            source="assignment_engine",
        ))

    def _check_transition(self, room: Room, target: RoomStatus, trigger: str) -> None:
        machine = create_room_state_machine(room.status)
        if not machine.can_transition_to(target.value, trigger):
            logger.warning(f"Room {room.number}: {trigger} rejected in status {room.status.value}")
            raise StateConflict(
                f"Room {room.number} is {room.status.value}; cannot {trigger.replace('_', ' ')}"
            )

    def _apply_transition(self, room: Room, target: RoomStatus, trigger: str) -> None:
        machine = create_room_state_machine(room.status)
        machine.transition_to(target.value, trigger)
        room.status = RoomStatus(machine.current_state)

    @staticmethod
    def _check_expected(room: Room, expected_status: Optional[RoomStatus]) -> None:
        if expected_status is not None and room.status != expected_status:
            raise StateConflict(
                f"Room {room.number} is {room.status.value}, expected {expected_status.value}"
            )

    @staticmethod
    def _require_holder(actor: Actor, room: Room) -> None:
        if room.assigned_cleaner_id != actor.id:
            raise Forbidden(f"Room {room.number} is not assigned to {actor.name}")

    def _stop_sessions(self, housekeeper_ids: List[str], now: datetime) -> None:
        for hk_id in housekeeper_ids:
            if self.sessions.stop_if_idle(hk_id):
                self._emit(EventType.SESSION_STOPPED, SessionData(timestamp=now, housekeeper_id=hk_id))

    def _status_event(self, event_type: EventType, room: Room, old: RoomStatus, reason: str, now: datetime) -> None:
        self._emit(event_type, RoomStatusChangedData(
            timestamp=now,
            room_id=room.id,
            room_number=room.number,
            old_status=old.value,
            new_status=room.status.value,
            reason=reason,
        ))

    # ---------- rooms / catalog / directory ----------

    def add_room(self, room_id: str, number: str, room_type: str, floor: int,
                 status: RoomStatus = RoomStatus.CHECKOUT) -> Room:
        room = self.registry.add_room(room_id, number, room_type, floor, status)
        self._status_event(EventType.ROOM_ADDED, room, status, "registered", self.now())
        return room

    def add_adhoc_task(self, room_id: str, label: str, category: str) -> ChecklistItem:
        room = self.registry.get(room_id)
        item = self.registry.add_adhoc_task(room, label, category)
        self._emit(EventType.TASK_ADDED, RoomViewData(
            timestamp=self.now(), room_id=room.id, category=item.category, label=item.label,
        ))
        return item

    def ingest_catalog(self, feed: Mapping[str, Any]) -> int:
        version = self.catalog.ingest(feed)
        self._emit(EventType.CATALOG_UPDATED, CatalogData(
            timestamp=self.now(), version=version, categories=self.catalog.categories(),
        ))
        return version

    def create_cleaner(self, profile: Mapping[str, Any]) -> Cleaner:
        cleaner = self.directory.create(profile)
        self._emit(EventType.CLEANER_SAVED, CleanerData(
            timestamp=self.now(), cleaner_id=cleaner.id, cleaner_name=cleaner.name, active=cleaner.active,
        ))
        return cleaner

    def update_cleaner(self, cleaner_id: str, profile: Mapping[str, Any]) -> Cleaner:
        cleaner = self.directory.update(cleaner_id, profile)
        self._emit(EventType.CLEANER_SAVED, CleanerData(
            timestamp=self.now(), cleaner_id=cleaner.id, cleaner_name=cleaner.name, active=cleaner.active,
        ))
        return cleaner

    def deactivate_cleaner(self, cleaner_id: str) -> Tuple[Cleaner, List[str]]:
        """
        Deactivate a cleaner and send every room they hold back to checkout.

        Rooms in cleaning lose their session start; checklist progress stays.
        The cleaner's selection is emptied, which stops their session.
        """
        cleaner = self.directory.get(cleaner_id)
        rooms = [
            r for r in self.registry.all()
            if r.assigned_cleaner_id == cleaner_id
            and r.status in (RoomStatus.ASSIGNED, RoomStatus.IN_CLEANING)
        ]
        now = self.now()

        self.directory.deactivate(cleaner_id)
        holders = {cleaner_id}
        for room in rooms:
            old = room.status
            self._apply_transition(room, RoomStatus.CHECKOUT, UNASSIGN)
            room.assigned_cleaner_id = None
            room.session_start_time = None
            holders.update(self.sessions.release_room(room.id))
            self._status_event(EventType.ROOM_UNASSIGNED, room, old, "cleaner deactivated", now)
        for room_id in self.sessions.selected(cleaner_id):
            self.sessions.deselect(cleaner_id, room_id)
        for room_id in [rid for rid, p in self._proposals.items() if p.cleaner_id == cleaner_id]:
            del self._proposals[room_id]
        self._stop_sessions(sorted(holders), now)

        unassigned = [r.id for r in rooms]
        logger.info(f"Cleaner {cleaner.name} deactivated; unassigned {unassigned}")
        self._emit(EventType.CLEANER_DEACTIVATED, CleanerData(
            timestamp=now, cleaner_id=cleaner.id, cleaner_name=cleaner.name,
            active=False, unassigned_room_ids=unassigned,
        ))
        return cleaner, unassigned

    def active_cleaners(self) -> List[Tuple[Cleaner, List[Room]]]:
        """Active cleaners that currently hold assigned or in-cleaning rooms."""
        panel = []
        for cleaner in self.directory.list(active_only=True):
            rooms = [
                r for r in self.registry.all()
                if r.assigned_cleaner_id == cleaner.id
                and r.status in (RoomStatus.ASSIGNED, RoomStatus.IN_CLEANING)
            ]
            if rooms:
                panel.append((cleaner, rooms))
        return panel

    # ---------- manager: propose / accept / reject ----------

    def proposal(self, room_id: str) -> Optional[PendingProposal]:
        return self._proposals.get(room_id)

    def proposals(self) -> List[PendingProposal]:
        return list(self._proposals.values())

    def last_rejected(self, room_id: str) -> Optional[str]:
        return self._last_rejected.get(room_id)

    def propose(self, room_id: str, cleaner_id: str,
                expected_status: Optional[RoomStatus] = None) -> PendingProposal:
        """
        Manager proposes a cleaner for a room; nothing changes until accept.

        A checkout room gets a first assignment, an assigned or in-cleaning
        room gets a reassignment. Proposing again replaces the pending one.
        """
        room = self.registry.get(room_id)
        self._check_expected(room, expected_status)
        cleaner = self.directory.require_active(cleaner_id)

        if room.status == RoomStatus.CHECKOUT:
            is_reassignment = False
            if self._last_rejected.get(room_id) == cleaner_id:
                raise PreconditionFailed(f"{cleaner.name} already declined room {room.number}")
        elif room.status in (RoomStatus.ASSIGNED, RoomStatus.IN_CLEANING):
            is_reassignment = True
            if room.assigned_cleaner_id == cleaner_id:
                raise PreconditionFailed(f"Room {room.number} is already assigned to {cleaner.name}")
        else:
            raise PreconditionFailed(f"Room {room.number} is {room.status.value}; nothing to assign")

        now = self.now()
        proposal = PendingProposal(
            room_id=room_id,
            cleaner_id=cleaner_id,
            is_reassignment=is_reassignment,
            expected_status=room.status,
            proposed_at=now,
        )
        self._proposals[room_id] = proposal
        self._emit(EventType.ASSIGNMENT_PROPOSED, AssignmentData(
            timestamp=now, room_id=room.id, room_number=room.number,
            cleaner_id=cleaner.id, cleaner_name=cleaner.name,
            previous_cleaner_id=room.assigned_cleaner_id, is_reassignment=is_reassignment,
        ))
        return proposal

    def _pending_proposal(self, room_id: str, actor: Optional[Actor]) -> PendingProposal:
        proposal = self._proposals.get(room_id)
        if proposal is None:
            raise NotFound("Proposal", room_id)
        if actor is not None and actor.role == ActorRole.HOUSEKEEPER and actor.id != proposal.cleaner_id:
            raise Forbidden(f"The proposal for room {room_id} is addressed to another cleaner")
        return proposal

    def accept(self, room_id: str, actor: Optional[Actor] = None) -> Room:
        proposal = self._pending_proposal(room_id, actor)
        room = self.registry.get(room_id)
        if room.status != proposal.expected_status:
            logger.warning(f"Stale proposal for room {room.number}: {room.status.value}")
            raise StateConflict(
                f"Room {room.number} changed to {room.status.value} since the proposal was made"
            )
        cleaner = self.directory.require_active(proposal.cleaner_id)
        if not proposal.is_reassignment:
            self._check_transition(room, RoomStatus.ASSIGNED, ACCEPT_ASSIGNMENT)

        now = self.now()
        previous = room.assigned_cleaner_id
        if proposal.is_reassignment:
            room.assigned_cleaner_id = cleaner.id
            if room.status == RoomStatus.IN_CLEANING:
                holders = self.sessions.holders_of(room.id)
                for hk_id in holders:
                    self.sessions.deselect(hk_id, room.id)
                self._stop_sessions(holders, now)
                self.sessions.select(cleaner.id, room.id)
                if self.sessions.start(cleaner.id, now):
                    self._emit(EventType.SESSION_STARTED, SessionData(
                        timestamp=now, housekeeper_id=cleaner.id, started_at=now,
                        selected_room_ids=self.sessions.selected(cleaner.id),
                    ))
        else:
            self._apply_transition(room, RoomStatus.ASSIGNED, ACCEPT_ASSIGNMENT)
            room.assigned_cleaner_id = cleaner.id

        self.ledger.record_history(cleaner.id, room.number, AssignedBy.MANAGER, now)
        del self._proposals[room_id]
        self._last_rejected.pop(room_id, None)

        logger.info(f"Room {room.number} {'reassigned' if previous else 'assigned'} to {cleaner.name}")
        self._emit(
            EventType.ROOM_REASSIGNED if proposal.is_reassignment else EventType.ROOM_ASSIGNED,
            AssignmentData(
                timestamp=now, room_id=room.id, room_number=room.number,
                cleaner_id=cleaner.id, cleaner_name=cleaner.name,
                previous_cleaner_id=previous, is_reassignment=proposal.is_reassignment,
            ),
        )
        return room

    def reject(self, room_id: str, actor: Optional[Actor] = None) -> PendingProposal:
        proposal = self._pending_proposal(room_id, actor)
        room = self.registry.get(room_id)

        del self._proposals[room_id]
        if not proposal.is_reassignment:
            self._last_rejected[room_id] = proposal.cleaner_id

        self._emit(EventType.ASSIGNMENT_REJECTED, AssignmentData(
            timestamp=self.now(), room_id=room.id, room_number=room.number,
            cleaner_id=proposal.cleaner_id,
            cleaner_name=self.directory.display_name(proposal.cleaner_id) or "",
            is_reassignment=proposal.is_reassignment,
        ))
        return proposal

    def reassignment_options(self, room_id: str) -> List[Cleaner]:
        room = self.registry.get(room_id)
        excluded = {self._last_rejected.get(room_id), room.assigned_cleaner_id}
        return [c for c in self.directory.list(active_only=True) if c.id not in excluded]

    def reassign_from_message(self, message_id: str, cleaner_id: str) -> PendingProposal:
        message = self.messages.get(message_id)
        if not self.messages.is_actionable(message, self.registry):
            raise StateConflict(f"Room {message.room_number} is no longer waiting for a cleaner")
        room = self.registry.find_by_number(message.room_number)
        return self.propose(room.id, cleaner_id, expected_status=RoomStatus.CHECKOUT)

    def bulk_assign(self, room_ids: List[str], cleaner_id: str) -> List[Room]:
        """Assign several checkout rooms to one cleaner; all or nothing."""
        if not room_ids:
            raise ValidationFailed({"room_ids": "At least one room is required"})
        cleaner = self.directory.require_active(cleaner_id)
        rooms: List[Room] = []
        for room_id in dict.fromkeys(room_ids):
            room = self.registry.get(room_id)
            self._check_transition(room, RoomStatus.ASSIGNED, BULK_ASSIGN)
            rooms.append(room)

        now = self.now()
        for room in rooms:
            self._apply_transition(room, RoomStatus.ASSIGNED, BULK_ASSIGN)
            room.assigned_cleaner_id = cleaner.id
            self.ledger.record_history(cleaner.id, room.number, AssignedBy.MANAGER, now)
            self._proposals.pop(room.id, None)
            self._last_rejected.pop(room.id, None)

        logger.info(f"Bulk assigned {[r.number for r in rooms]} to {cleaner.name}")
        self._emit(EventType.ROOMS_BULK_ASSIGNED, BulkAssignmentData(
            timestamp=now, room_ids=[r.id for r in rooms],
            cleaner_id=cleaner.id, cleaner_name=cleaner.name,
        ))
        return rooms

    def guest_checkout(self, room_id: str, expected_status: Optional[RoomStatus] = None) -> Room:
        """A new guest left an available room; it needs cleaning again."""
        room = self.registry.get(room_id)
        self._check_expected(room, expected_status)
        self._check_transition(room, RoomStatus.CHECKOUT, GUEST_CHECKOUT)

        now = self.now()
        self._apply_transition(room, RoomStatus.CHECKOUT, GUEST_CHECKOUT)
        room.assigned_cleaner_id = None
        room.session_start_time = None
        self.registry.reset_checklist(room)
        self._status_event(EventType.GUEST_CHECKED_OUT, room, RoomStatus.AVAILABLE, "guest checkout", now)
        return room

    # ---------- housekeeper: selection / proceed ----------

    def select_room(self, actor: Actor, room_id: str) -> List[str]:
        room = self.registry.get(room_id)
        self.directory.require_active(actor.id)
        own = room.assigned_cleaner_id == actor.id
        if not (room.status == RoomStatus.CHECKOUT
                or (room.status in (RoomStatus.ASSIGNED, RoomStatus.IN_CLEANING) and own)):
            raise StateConflict(f"Room {room.number} is not available for selection")

        now = self.now()
        if self.sessions.select(actor.id, room_id):
            self._emit(EventType.SELECTION_CHANGED, SessionData(
                timestamp=now, housekeeper_id=actor.id,
                selected_room_ids=self.sessions.selected(actor.id),
            ))
        if room.status == RoomStatus.IN_CLEANING and self.sessions.start(actor.id, now):
            self._emit(EventType.SESSION_STARTED, SessionData(
                timestamp=now, housekeeper_id=actor.id, started_at=now,
                selected_room_ids=self.sessions.selected(actor.id),
            ))
        return self.sessions.selected(actor.id)

    def deselect_room(self, actor: Actor, room_id: str, note: Optional[str] = None) -> Optional[ExceptionMessage]:
        """
        Take a room off the selection. A room already in cleaning is abandoned
        instead, and the resulting exception message is returned.
        """
        room = self.registry.get(room_id)
        if not self.sessions.is_selected(actor.id, room_id):
            return None
        if room.status == RoomStatus.IN_CLEANING and room.assigned_cleaner_id == actor.id:
            return self.abandon(actor, room_id, note)

        now = self.now()
        self.sessions.deselect(actor.id, room_id)
        self._emit(EventType.SELECTION_CHANGED, SessionData(
            timestamp=now, housekeeper_id=actor.id,
            selected_room_ids=self.sessions.selected(actor.id),
        ))
        self._stop_sessions([actor.id], now)
        return None

    def proceed(self, actor: Actor) -> List[Room]:
        """Start cleaning every selected room in one step."""
        self.directory.require_active(actor.id)
        selected = [self.registry.get(rid) for rid in self.sessions.selected(actor.id)]
        if not selected:
            raise PreconditionFailed("No rooms selected")

        pending: List[Room] = []
        for room in selected:
            own = room.assigned_cleaner_id == actor.id
            if room.status == RoomStatus.IN_CLEANING and own:
                continue
            if room.status == RoomStatus.ASSIGNED and not own:
                raise StateConflict(f"Room {room.number} was assigned to someone else")
            self._check_transition(room, RoomStatus.IN_CLEANING, START_CLEANING)
            pending.append(room)

        now = self.now()
        for room in pending:
            if room.assigned_cleaner_id is None:
                room.assigned_cleaner_id = actor.id
                self.ledger.record_history(actor.id, room.number, AssignedBy.HOUSEKEEPER, now)
            self._apply_transition(room, RoomStatus.IN_CLEANING, START_CLEANING)
            room.session_start_time = room.session_start_time or now
            self._last_rejected.pop(room.id, None)

        if self.sessions.start(actor.id, now):
            self._emit(EventType.SESSION_STARTED, SessionData(
                timestamp=now, housekeeper_id=actor.id, started_at=now,
                selected_room_ids=self.sessions.selected(actor.id),
            ))
        if pending:
            logger.info(f"{actor.name} started cleaning {[r.number for r in pending]}")
            self._emit(EventType.CLEANING_STARTED, CleaningStartedData(
                timestamp=now, housekeeper_id=actor.id, housekeeper_name=actor.name,
                room_ids=[r.id for r in pending],
            ))
        return selected

    # ---------- housekeeper: cleaning ----------

    def toggle_task(self, actor: Actor, room_id: str, task_id: str) -> ChecklistItem:
        room = self.registry.get(room_id)
        if room.status != RoomStatus.IN_CLEANING:
            raise StateConflict(f"Room {room.number} is not being cleaned")
        self._require_holder(actor, room)

        item = self.registry.toggle_task(room, task_id)
        self._emit(EventType.TASK_TOGGLED, TaskToggledData(
            timestamp=self.now(), room_id=room.id, task_id=item.task_id,
            category=item.category, completed=item.completed,
        ))
        return item

    def toggle_view(self, actor: Actor, room_id: str, category: str) -> Optional[str]:
        room = self.registry.get(room_id)
        if category not in self.registry.applicable_categories(room):
            raise PreconditionFailed(f"Category {category} does not apply to a {room.room_type}")
        active = self.sessions.toggle_view(room_id, category)
        self._emit(EventType.VIEW_CHANGED, RoomViewData(timestamp=self.now(), room_id=room_id, category=active))
        return active

    def abandon(self, actor: Actor, room_id: str, note: Optional[str] = None) -> ExceptionMessage:
        """Give up on a room mid-clean: the manager gets a message and the room returns to checkout."""
        room = self.registry.get(room_id)
        if room.status != RoomStatus.IN_CLEANING:
            raise StateConflict(f"Room {room.number} is not being cleaned")
        self._require_holder(actor, room)

        now = self.now()
        elapsed = seconds_between(room.session_start_time, now) or 0
        cleaner_id = room.assigned_cleaner_id
        message = self.messages.post(
            room_number=room.number,
            cleaner_id=cleaner_id,
            cleaner_name=self.directory.display_name(cleaner_id) or actor.name,
            time_spent_seconds=elapsed,
            note=note,
            timestamp=now,
        )
        self._apply_transition(room, RoomStatus.CHECKOUT, ABANDON)
        room.assigned_cleaner_id = None
        room.session_start_time = None
        holders = self.sessions.release_room(room_id)
        self._stop_sessions(holders, now)

        logger.info(f"Room {room.number} abandoned after {message.time_spent}")
        self._emit(EventType.ROOM_ABANDONED, RoomAbandonedData(
            timestamp=now, room_id=room.id, room_number=room.number,
            housekeeper_id=cleaner_id or actor.id, message_id=message.id,
            time_spent_seconds=elapsed, note=message.note,
        ))
        return message

    def finish(self, actor: Actor, room_id: str) -> CleaningHistoryRecord:
        room = self.registry.get(room_id)
        if room.status != RoomStatus.IN_CLEANING:
            raise StateConflict(f"Room {room.number} is not being cleaned")
        self._require_holder(actor, room)
        completed, total = self.registry.progress(room)
        if total == 0 or completed != total:
            raise PreconditionFailed(f"Room {room.number} has {total - completed} open tasks")

        now = self.now()
        start = room.session_start_time or now
        cleaner = self.directory.find(room.assigned_cleaner_id)
        record = CleaningHistoryRecord(
            id=f"clean-{uuid.uuid4().hex[:12]}",
            room_id=room.id,
            room_number=room.number,
            room_type=room.room_type,
            floor=room.floor,
            cleaning_date=now.date().isoformat(),
            start_time=start,
            end_time=now,
            duration_seconds=seconds_between(start, now),
            completed_tasks=tuple(self.registry.visible_tasks(room)),
            housekeeper_id=cleaner.id if cleaner else actor.id,
            housekeeper_name=cleaner.name if cleaner else actor.name,
        )
        self.ledger.record_completion(record)
        self._apply_transition(room, RoomStatus.AVAILABLE, FINISH)
        room.session_start_time = None
        holders = self.sessions.release_room(room_id)
        self._stop_sessions(holders, now)

        self._emit(EventType.CLEANING_FINISHED, CleaningFinishedData(
            timestamp=now, room_id=room.id, room_number=room.number,
            housekeeper_id=record.housekeeper_id, housekeeper_name=record.housekeeper_name,
            record_id=record.id, duration_seconds=record.duration_seconds,
        ))
        return record

    # ---------- persistence ----------

    def restore(self, proposals: List[PendingProposal], last_rejected: Dict[str, str]) -> None:
        self._proposals = {p.room_id: p for p in proposals}
        self._last_rejected = dict(last_rejected)
