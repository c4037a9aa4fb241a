"""
SQLAlchemy tables for the persisted store state.
Each save rewrites the whole snapshot inside one transaction.
"""
from sqlalchemy import (
    Boolean, Column, DateTime, Integer, JSON, String, Text, UniqueConstraint
)

from housekeeping.database import Base


class RoomRow(Base):
    __tablename__ = "hk_rooms"

    id = Column(String(32), primary_key=True)
    position = Column(Integer, nullable=False, default=0)  # registry order
    number = Column(String(16), unique=True, nullable=False)
    room_type = Column(String(100), nullable=False)
    floor = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    assigned_cleaner_id = Column(String(32), nullable=True)
    session_start_time = Column(DateTime, nullable=True)
    checklist = Column(JSON, nullable=False, default=list)


class CleanerRow(Base):
    __tablename__ = "hk_cleaners"

    id = Column(String(32), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(200), default="")
    nic = Column(String(20), default="")
    address = Column(Text, default="")
    active = Column(Boolean, default=True)


class MessageRow(Base):
    __tablename__ = "hk_messages"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)  # FIFO order
    room_number = Column(String(16), nullable=False)
    cleaner_id = Column(String(32), nullable=True)
    cleaner_name = Column(String(100), nullable=False)
    time_spent = Column(String(16), nullable=False)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False)


class CleaningHistoryRow(Base):
    __tablename__ = "hk_cleaning_history"

    id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    room_id = Column(String(32), nullable=False)
    room_number = Column(String(16), nullable=False, index=True)
    room_type = Column(String(100), nullable=False)
    floor = Column(Integer, nullable=False)
    cleaning_date = Column(String(10), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    duration_seconds = Column(Integer, nullable=False)
    status = Column(String(20), default="completed")
    completed_tasks = Column(JSON, nullable=False, default=list)
    housekeeper_id = Column(String(32), nullable=False, index=True)
    housekeeper_name = Column(String(100), nullable=False)


class RoomHistoryRow(Base):
    __tablename__ = "hk_room_history"
    __table_args__ = (UniqueConstraint("cleaner_id", "room_number", name="uq_room_history_cleaner_room"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    cleaner_id = Column(String(32), nullable=False, index=True)
    room_number = Column(String(16), nullable=False)
    assigned_by = Column(String(20), nullable=False)
    timestamp = Column(DateTime, nullable=False)


class SessionRow(Base):
    __tablename__ = "hk_sessions"

    housekeeper_id = Column(String(32), primary_key=True)
    started_at = Column(DateTime, nullable=True)
    selected_room_ids = Column(JSON, nullable=False, default=list)


class ActiveViewRow(Base):
    __tablename__ = "hk_active_views"

    room_id = Column(String(32), primary_key=True)
    category = Column(String(100), nullable=False)


class ProposalRow(Base):
    __tablename__ = "hk_proposals"

    room_id = Column(String(32), primary_key=True)
    cleaner_id = Column(String(32), nullable=False)
    is_reassignment = Column(Boolean, default=False)
    expected_status = Column(String(20), nullable=False)
    proposed_at = Column(DateTime, nullable=False)


class RejectionRow(Base):
    __tablename__ = "hk_last_rejected"

    room_id = Column(String(32), primary_key=True)
    cleaner_id = Column(String(32), nullable=False)


class CatalogRow(Base):
    __tablename__ = "hk_catalog"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, default=0)
    feed = Column(JSON, nullable=False, default=dict)
