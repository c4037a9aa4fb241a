"""
Pytest configuration and shared fixtures
"""
import os

os.environ.setdefault("PERSIST_STATE", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from core.engine.event_bus import event_bus
from housekeeping.database import Base
from housekeeping.dependencies import get_store
from housekeeping.models import orm  # noqa: F401 - registers tables
from housekeeping.models.domain import Actor, ActorRole
from housekeeping.security.auth import create_access_token
from housekeeping.services.store import HousekeepingStore
from housekeeping.main import app


MARIA_PROFILE = {
    "name": "Maria Garcia",
    "phone": "12025550147",
    "email": "maria@hotel.com",
    "nic": "123456789V",
    "address": "123 Main Street, Colombo 05",
}

AHMED_PROFILE = {
    "name": "Ahmed Hassan",
    "phone": "12025550120",
    "email": "ahmed@hotel.com",
    "nic": "200145601234",
    "address": "456 Park Avenue, Kandy",
}


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: int = 0, minutes: int = 0, hours: int = 0) -> datetime:
        self.current += timedelta(seconds=seconds, minutes=minutes, hours=hours)
        return self.current


@pytest.fixture(autouse=True)
def reset_event_bus():
    """The event bus is a process-wide singleton"""
    event_bus.clear()
    yield
    event_bus.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def published_events():
    """Events the store published, in order"""
    return []


@pytest.fixture
def store(clock, published_events):
    """Store with two active cleaners (hk-1, hk-2) and three checkout rooms"""
    s = HousekeepingStore(clock=clock, event_publisher=published_events.append)
    s.create_cleaner(MARIA_PROFILE)
    s.create_cleaner(AHMED_PROFILE)
    s.add_room("r-101", "101", "Deluxe King", 10)
    s.add_room("r-102", "102", "Garden Suite", 10)
    s.add_room("r-201", "201", "Executive Suite", 20)
    published_events.clear()
    return s


@pytest.fixture
def manager():
    return Actor(id="mgr-1", name="Front Office Manager", role=ActorRole.MANAGER)


@pytest.fixture
def maria():
    return Actor(id="hk-1", name="Maria Garcia", role=ActorRole.HOUSEKEEPER)


@pytest.fixture
def ahmed():
    return Actor(id="hk-2", name="Ahmed Hassan", role=ActorRole.HOUSEKEEPER)


@pytest.fixture
def complete_room(store):
    """Return a helper that completes every visible task of a room in order"""
    def _complete(actor, room_id):
        for task in store.visible_tasks(room_id):
            if not task.completed:
                store.toggle_task(actor, room_id, task.task_id)
    return _complete


@pytest.fixture
def cleaning_room(store, maria):
    """r-101 in cleaning by Maria"""
    store.select_room(maria, "r-101")
    store.proceed(maria)
    return "r-101"


# ============== Database ==============

@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(db_session_factory):
    session = db_session_factory()
    yield session
    session.close()


# ============== HTTP ==============

@pytest.fixture(scope="function")
def client(store):
    """Test client bound to the store fixture"""
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def manager_auth_headers():
    token = create_access_token("mgr-1", "Front Office Manager", ActorRole.MANAGER)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def maria_auth_headers():
    token = create_access_token("hk-1", "Maria Garcia", ActorRole.HOUSEKEEPER)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def ahmed_auth_headers():
    token = create_access_token("hk-2", "Ahmed Hassan", ActorRole.HOUSEKEEPER)
    return {"Authorization": f"Bearer {token}"}
