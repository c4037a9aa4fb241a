"""
Pydantic schemas
Request / response validation for the HTTP API
"""
from datetime import datetime
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, field_validator, ConfigDict

from housekeeping.models.domain import RoomStatus, AssignedBy


# ============== Rooms ==============

class ChecklistItemResponse(BaseModel):
    task_id: str
    label: str
    category: str
    completed: bool
    model_config = ConfigDict(from_attributes=True)


class RoomCreate(BaseModel):
    id: str = Field(..., max_length=32)
    number: str = Field(..., max_length=16)
    room_type: str = Field(..., max_length=100)
    floor: int
    status: RoomStatus = RoomStatus.CHECKOUT


class RoomResponse(BaseModel):
    id: str
    number: str
    room_type: str
    floor: int
    status: RoomStatus
    assigned_cleaner_id: Optional[str] = None
    session_start_time: Optional[datetime] = None
    checklist: List[ChecklistItemResponse] = []
    model_config = ConfigDict(from_attributes=True)


class ProgressResponse(BaseModel):
    completed: int
    total: int


class ProposalResponse(BaseModel):
    room_id: str
    cleaner_id: str
    is_reassignment: bool
    expected_status: RoomStatus
    proposed_at: datetime
    model_config = ConfigDict(from_attributes=True)


class RoomViewResponse(RoomResponse):
    """Room with derived fields resolved for display"""
    assigned_cleaner_name: Optional[str] = None
    visible_tasks: List[ChecklistItemResponse] = []
    applicable_categories: List[str] = []
    progress: ProgressResponse
    is_fully_clean: bool = False
    elapsed_seconds: Optional[int] = None
    active_category: Optional[str] = None
    pending_proposal: Optional[ProposalResponse] = None
    last_rejected_cleaner_id: Optional[str] = None


class AdhocTaskCreate(BaseModel):
    label: str = Field(..., max_length=200)
    category: str = Field(..., max_length=100)


class TaskToggleResponse(ChecklistItemResponse):
    progress: ProgressResponse


class GuestCheckoutRequest(BaseModel):
    expected_status: Optional[RoomStatus] = None


# ============== Cleaners ==============

class CleanerProfile(BaseModel):
    """Profile fields are validated by the directory so every field error is reported together"""
    name: str = ""
    phone: str = ""
    email: str = ""
    nic: str = ""
    address: str = ""
    active: bool = True


class CleanerResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: str = ""
    nic: str = ""
    address: str = ""
    active: bool = True
    model_config = ConfigDict(from_attributes=True)


class DeactivateResponse(BaseModel):
    cleaner: CleanerResponse
    unassigned_room_ids: List[str] = []


class ActiveCleanerRoom(BaseModel):
    id: str
    number: str
    status: RoomStatus


class ActiveCleanerResponse(BaseModel):
    cleaner: CleanerResponse
    rooms: List[ActiveCleanerRoom]


# ============== Assignments ==============

class ProposalCreate(BaseModel):
    room_id: str
    cleaner_id: str
    expected_status: Optional[RoomStatus] = None


class BulkAssignRequest(BaseModel):
    room_ids: List[str]
    cleaner_id: str

    @field_validator("room_ids")
    @classmethod
    def strip_blank_ids(cls, v: List[str]) -> List[str]:
        return [room_id.strip() for room_id in v if room_id and room_id.strip()]


class MessageReassignRequest(BaseModel):
    cleaner_id: str


# ============== Housekeeper sessions ==============

class SessionResponse(BaseModel):
    housekeeper_id: str
    selected_room_ids: List[str] = []
    started_at: Optional[datetime] = None
    session_elapsed_seconds: Optional[int] = None
    session_elapsed: Optional[str] = None


class DeselectRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=500)


class AbandonRequest(BaseModel):
    note: Optional[str] = Field(None, max_length=500)


class ViewToggleRequest(BaseModel):
    category: str


class ViewToggleResponse(BaseModel):
    room_id: str
    active_category: Optional[str] = None


# ============== Messages / history ==============

class MessageResponse(BaseModel):
    id: str
    room_number: str
    cleaner_id: Optional[str] = None
    cleaner_name: str
    time_spent: str
    time_spent_seconds: int
    note: str
    timestamp: datetime
    actionable: bool = False
    model_config = ConfigDict(from_attributes=True)


class CleaningHistoryResponse(BaseModel):
    id: str
    room_id: str
    room_number: str
    room_type: str
    floor: int
    cleaning_date: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int
    status: str
    completed_tasks: List[ChecklistItemResponse]
    housekeeper_id: str
    housekeeper_name: str
    model_config = ConfigDict(from_attributes=True)


class RoomHistoryResponse(BaseModel):
    room_number: str
    assigned_by: AssignedBy
    timestamp: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== Catalog ==============

class CatalogTask(BaseModel):
    task_id: str
    label: str
    icon: str


class CatalogCategory(BaseModel):
    roomTypes: List[str] = []
    tasks: List[CatalogTask] = []


class CatalogResponse(BaseModel):
    version: int
    categories: Dict[str, CatalogCategory]


class CatalogIngestResponse(BaseModel):
    version: int
