"""
Database setup - SQLite persistence layer
The database only stores snapshots of the in-memory store; all workflow
operations go through HousekeepingStore.
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base

from housekeeping.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create tables"""
    from housekeeping.models import orm  # noqa
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    if bind.dialect.name == "sqlite" and bind.url.database not in (None, "", ":memory:"):
        # WAL mode for concurrent readers
        with bind.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.commit()
