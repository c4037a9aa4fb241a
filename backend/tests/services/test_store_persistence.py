"""
Store snapshots, export/restore and the SQLAlchemy state repository
"""
from datetime import timedelta

import pytest

from housekeeping.models.domain import AssignedBy, RoomStatus
from housekeeping.models.orm import CatalogRow, RoomRow
from housekeeping.services.persistence import PersistedState, SqlAlchemyStateRepository
from housekeeping.services.store import HousekeepingStore


@pytest.fixture
def repository(db_session_factory):
    return SqlAlchemyStateRepository(db_session_factory)


@pytest.fixture
def busy_store(store, maria, ahmed, complete_room, clock):
    """Store with history, a message, a proposal, a rejection and a running session"""
    store.ingest_catalog({"balcony": {"tasks": ["Sweep"], "roomTypes": ["Suite"]}})
    store.add_adhoc_task("r-201", "Polish Brass", "washroom")

    store.select_room(maria, "r-101")
    store.proceed(maria)
    clock.advance(minutes=20)
    complete_room(maria, "r-101")
    store.finish(maria, "r-101")

    store.select_room(ahmed, "r-102")
    store.proceed(ahmed)
    store.toggle_view(ahmed, "r-102", "balcony")

    store.propose("r-201", "hk-1")
    store.reject("r-201", maria)
    store.propose("r-201", "hk-2")

    store.select_room(maria, "r-201")
    return store


class TestSnapshots:

    def test_reads_are_copies(self, store):
        room = store.room("r-101")
        room.status = RoomStatus.AVAILABLE
        room.checklist[0].completed = True

        fresh = store.room("r-101")
        assert fresh.status == RoomStatus.CHECKOUT
        assert fresh.checklist[0].completed is False

    def test_returned_mutation_results_are_copies(self, store):
        cleaner = store.create_cleaner({
            "name": "Sofia Rodriguez", "phone": "12025550170",
            "nic": "987654321X", "address": "789 Beach Road",
        })
        cleaner.name = "Changed"
        assert store.cleaner(cleaner.id).name == "Sofia Rodriguez"

    def test_room_view(self, store, maria, clock, cleaning_room):
        clock.advance(seconds=95)
        view = store.room_view(cleaning_room)

        assert view["assigned_cleaner_name"] == "Maria Garcia"
        assert view["elapsed_seconds"] == 95
        assert view["progress"] == {"completed": 0, "total": 18}
        assert view["is_fully_clean"] is False
        assert view["applicable_categories"] == ["washroom", "kitchen", "bedroom"]
        assert view["pending_proposal"] is None

    def test_session_view_elapsed(self, store, clock, cleaning_room):
        clock.advance(hours=1, minutes=2, seconds=5)
        assert store.session_view("hk-1")["session_elapsed"] == "01:02:05"
        assert store.session_view("hk-2")["session_elapsed"] is None

    def test_status_counts(self, store, cleaning_room):
        assert store.status_counts() == {
            "checkout": 2, "assigned": 0, "in_cleaning": 1, "available": 0,
        }

    def test_find_cleaner_by_name(self, store):
        assert store.find_cleaner_by_name("ahmed hassan").id == "hk-2"
        assert store.find_cleaner_by_name("Nobody") is None


class TestExportRestore:

    def test_round_trip_through_store(self, busy_store, clock):
        state = busy_store.export_state()
        other = HousekeepingStore(clock=clock, event_publisher=lambda e: None)
        other.restore_state(state)

        assert [r.to_dict() for r in other.rooms()] == [r.to_dict() for r in busy_store.rooms()]
        assert other.catalog.version == busy_store.catalog.version
        assert other.room_view("r-102")["active_category"] == "balcony"
        assert other.room_view("r-201")["last_rejected_cleaner_id"] == "hk-1"
        assert [p.cleaner_id for p in other.proposals()] == ["hk-2"]
        assert other.session_view("hk-1")["selected_room_ids"] == ["r-201"]
        assert len(other.cleaning_history()) == 1

    def test_stale_session_start_discarded(self, busy_store, clock):
        state = busy_store.export_state()
        clock.advance(hours=25)
        other = HousekeepingStore(clock=clock, event_publisher=lambda e: None, session_max_age_hours=24)
        other.restore_state(state)

        assert other.session_view("hk-2")["started_at"] is None
        assert other.session_view("hk-2")["selected_room_ids"] == ["r-102"]
        assert other.room("r-102").session_start_time is not None

    def test_restore_does_not_alias_state(self, busy_store, clock):
        state = busy_store.export_state()
        other = HousekeepingStore(clock=clock, event_publisher=lambda e: None)
        other.restore_state(state)
        state.rooms[0].status = RoomStatus.CHECKOUT
        assert other.room("r-101").status == RoomStatus.AVAILABLE

    def test_is_empty(self, clock):
        empty = HousekeepingStore(clock=clock, event_publisher=lambda e: None)
        assert empty.is_empty()
        assert empty.save() is False
        assert empty.load() is False


class TestSqlAlchemyStateRepository:

    def test_load_empty_database(self, repository):
        assert repository.load() is None

    def test_save_and_load(self, busy_store, repository, clock):
        repository.save(busy_store.export_state())
        loaded = repository.load()

        original = busy_store.export_state()
        assert [r.to_dict() for r in loaded.rooms] == [r.to_dict() for r in original.rooms]
        assert [c.to_dict() for c in loaded.cleaners] == [c.to_dict() for c in original.cleaners]
        assert [r.to_dict() for r in loaded.cleaning_history] == [
            r.to_dict() for r in original.cleaning_history
        ]
        assert loaded.catalog_feed == original.catalog_feed
        assert loaded.catalog_version == original.catalog_version
        assert loaded.active_views == {"r-102": "balcony"}
        assert loaded.last_rejected == {"r-201": "hk-1"}
        assert [p.to_dict() for p in loaded.proposals] == [p.to_dict() for p in original.proposals]
        assert loaded.room_history["hk-1"][0].assigned_by == AssignedBy.HOUSEKEEPER

    def test_save_replaces_previous_snapshot(self, store, repository, db_session):
        store.repository = repository
        store.save()
        store.add_room("r-301", "301", "Standard Twin", 3)
        store.save()

        assert db_session.query(CatalogRow).count() == 1
        assert [row.id for row in db_session.query(RoomRow).order_by(RoomRow.position)] == [
            "r-101", "r-102", "r-201", "r-301",
        ]

    def test_store_load(self, busy_store, repository, clock):
        repository.save(busy_store.export_state())
        other = HousekeepingStore(clock=clock, event_publisher=lambda e: None, repository=repository)

        assert other.load() is True
        assert other.room("r-102").status == RoomStatus.IN_CLEANING
        assert other.catalog.find("sweep") is not None

    def test_messages_keep_fifo_order(self, store, maria, ahmed, repository, clock):
        store.select_room(maria, "r-101")
        store.select_room(ahmed, "r-102")
        store.proceed(maria)
        store.proceed(ahmed)
        first = store.abandon(maria, "r-101", "Guest still inside")
        clock.advance(seconds=30)
        second = store.abandon(ahmed, "r-102", "Broken key card")

        repository.save(store.export_state())
        loaded = repository.load()

        assert [m.id for m in loaded.messages] == [first.id, second.id]
        assert loaded.messages[1].timestamp - loaded.messages[0].timestamp == timedelta(seconds=30)
