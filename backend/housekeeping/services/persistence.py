"""
Persisted state boundary

StateRepository is the load/save hook of the store. The SQLAlchemy
implementation rewrites the full snapshot in one transaction on every save.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from housekeeping.models.domain import (
    AssignedBy,
    ChecklistItem,
    Cleaner,
    CleaningHistoryRecord,
    ExceptionMessage,
    PendingProposal,
    Room,
    RoomHistoryEntry,
    RoomStatus,
)
from housekeeping.models.orm import (
    ActiveViewRow,
    CatalogRow,
    CleanerRow,
    CleaningHistoryRow,
    MessageRow,
    ProposalRow,
    RejectionRow,
    RoomHistoryRow,
    RoomRow,
    SessionRow,
)
from housekeeping.services.sessions import HousekeeperSession

logger = logging.getLogger(__name__)


@dataclass
class PersistedState:
    """Everything needed to rebuild a HousekeepingStore."""
    catalog_feed: Dict = field(default_factory=dict)
    catalog_version: int = 0
    rooms: List[Room] = field(default_factory=list)
    cleaners: List[Cleaner] = field(default_factory=list)
    messages: List[ExceptionMessage] = field(default_factory=list)
    cleaning_history: List[CleaningHistoryRecord] = field(default_factory=list)
    room_history: Dict[str, List[RoomHistoryEntry]] = field(default_factory=dict)
    sessions: List[HousekeeperSession] = field(default_factory=list)
    active_views: Dict[str, str] = field(default_factory=dict)
    proposals: List[PendingProposal] = field(default_factory=list)
    last_rejected: Dict[str, str] = field(default_factory=dict)


class StateRepository(ABC):

    @abstractmethod
    def load(self) -> Optional[PersistedState]:
        """Return the last saved state, or None when nothing was saved yet."""

    @abstractmethod
    def save(self, state: PersistedState) -> None:
        ...


def _items(raw: List[Dict]) -> List[ChecklistItem]:
    return [
        ChecklistItem(
            task_id=i["task_id"],
            label=i["label"],
            category=i["category"],
            completed=bool(i.get("completed", False)),
        )
        for i in raw or []
    ]


class SqlAlchemyStateRepository(StateRepository):
    """
    Args:
        session_factory: zero-arg callable returning a SQLAlchemy Session
            (SessionLocal in production, a StaticPool factory in tests)
    """

    _TABLES = (
        RoomRow, CleanerRow, MessageRow, CleaningHistoryRow, RoomHistoryRow,
        SessionRow, ActiveViewRow, ProposalRow, RejectionRow, CatalogRow,
    )

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def save(self, state: PersistedState) -> None:
        db = self._session_factory()
        try:
            for table in self._TABLES:
                db.query(table).delete()

            db.add(CatalogRow(id=1, version=state.catalog_version, feed=state.catalog_feed))
            for pos, room in enumerate(state.rooms):
                db.add(RoomRow(
                    id=room.id, position=pos, number=room.number, room_type=room.room_type,
                    floor=room.floor, status=room.status.value,
                    assigned_cleaner_id=room.assigned_cleaner_id,
                    session_start_time=room.session_start_time,
                    checklist=[item.to_dict() for item in room.checklist],
                ))
            for pos, cleaner in enumerate(state.cleaners):
                db.add(CleanerRow(position=pos, **cleaner.to_dict()))
            for pos, message in enumerate(state.messages):
                db.add(MessageRow(
                    id=message.id, position=pos, room_number=message.room_number,
                    cleaner_id=message.cleaner_id, cleaner_name=message.cleaner_name,
                    time_spent=message.time_spent, time_spent_seconds=message.time_spent_seconds,
                    note=message.note, timestamp=message.timestamp,
                ))
            for pos, record in enumerate(state.cleaning_history):
                db.add(CleaningHistoryRow(
                    id=record.id, position=pos, room_id=record.room_id,
                    room_number=record.room_number, room_type=record.room_type,
                    floor=record.floor, cleaning_date=record.cleaning_date,
                    start_time=record.start_time, end_time=record.end_time,
                    duration_seconds=record.duration_seconds, status=record.status,
                    completed_tasks=[item.to_dict() for item in record.completed_tasks],
                    housekeeper_id=record.housekeeper_id, housekeeper_name=record.housekeeper_name,
                ))
            for cleaner_id, entries in state.room_history.items():
                for entry in entries:
                    db.add(RoomHistoryRow(
                        cleaner_id=cleaner_id, room_number=entry.room_number,
                        assigned_by=entry.assigned_by.value, timestamp=entry.timestamp,
                    ))
            for session in state.sessions:
                db.add(SessionRow(
                    housekeeper_id=session.housekeeper_id,
                    started_at=session.started_at,
                    selected_room_ids=list(session.selected_room_ids),
                ))
            for room_id, category in state.active_views.items():
                db.add(ActiveViewRow(room_id=room_id, category=category))
            for proposal in state.proposals:
                db.add(ProposalRow(
                    room_id=proposal.room_id, cleaner_id=proposal.cleaner_id,
                    is_reassignment=proposal.is_reassignment,
                    expected_status=proposal.expected_status.value,
                    proposed_at=proposal.proposed_at,
                ))
            for room_id, cleaner_id in state.last_rejected.items():
                db.add(RejectionRow(room_id=room_id, cleaner_id=cleaner_id))

            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def load(self) -> Optional[PersistedState]:
        db = self._session_factory()
        try:
            catalog = db.query(CatalogRow).filter(CatalogRow.id == 1).first()
            if catalog is None:
                return None

            state = PersistedState(catalog_feed=catalog.feed or {}, catalog_version=catalog.version)
            state.rooms = [
                Room(
                    id=row.id, number=row.number, room_type=row.room_type, floor=row.floor,
                    status=RoomStatus(row.status), assigned_cleaner_id=row.assigned_cleaner_id,
                    checklist=_items(row.checklist), session_start_time=row.session_start_time,
                )
                for row in db.query(RoomRow).order_by(RoomRow.position).all()
            ]
            state.cleaners = [
                Cleaner(
                    id=row.id, name=row.name, phone=row.phone, email=row.email or "",
                    nic=row.nic or "", address=row.address or "", active=bool(row.active),
                )
                for row in db.query(CleanerRow).order_by(CleanerRow.position).all()
            ]
            state.messages = [
                ExceptionMessage(
                    id=row.id, room_number=row.room_number, cleaner_id=row.cleaner_id,
                    cleaner_name=row.cleaner_name, time_spent=row.time_spent,
                    time_spent_seconds=row.time_spent_seconds, note=row.note,
                    timestamp=row.timestamp,
                )
                for row in db.query(MessageRow).order_by(MessageRow.position).all()
            ]
            state.cleaning_history = [
                CleaningHistoryRecord(
                    id=row.id, room_id=row.room_id, room_number=row.room_number,
                    room_type=row.room_type, floor=row.floor, cleaning_date=row.cleaning_date,
                    start_time=row.start_time, end_time=row.end_time,
                    duration_seconds=row.duration_seconds,
                    completed_tasks=tuple(_items(row.completed_tasks)),
                    housekeeper_id=row.housekeeper_id, housekeeper_name=row.housekeeper_name,
                    status=row.status or "completed",
                )
                for row in db.query(CleaningHistoryRow).order_by(CleaningHistoryRow.position).all()
            ]
            for row in db.query(RoomHistoryRow).order_by(RoomHistoryRow.id).all():
                state.room_history.setdefault(row.cleaner_id, []).append(
                    RoomHistoryEntry(row.room_number, AssignedBy(row.assigned_by), row.timestamp)
                )
            state.sessions = [
                HousekeeperSession(
                    housekeeper_id=row.housekeeper_id,
                    selected_room_ids=list(row.selected_room_ids or []),
                    started_at=row.started_at,
                )
                for row in db.query(SessionRow).all()
            ]
            state.active_views = {row.room_id: row.category for row in db.query(ActiveViewRow).all()}
            state.proposals = [
                PendingProposal(
                    room_id=row.room_id, cleaner_id=row.cleaner_id,
                    is_reassignment=bool(row.is_reassignment),
                    expected_status=RoomStatus(row.expected_status),
                    proposed_at=row.proposed_at,
                )
                for row in db.query(ProposalRow).all()
            ]
            state.last_rejected = {row.room_id: row.cleaner_id for row in db.query(RejectionRow).all()}
            logger.info(f"Loaded persisted state: {len(state.rooms)} rooms, {len(state.cleaners)} cleaners")
            return state
        finally:
            db.close()
