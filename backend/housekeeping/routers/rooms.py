"""
Room routes - registry reads, manager room setup, housekeeper cleaning actions
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor, RoomStatus
from housekeeping.models.schemas import (
    AbandonRequest, AdhocTaskCreate, ChecklistItemResponse, CleaningHistoryResponse,
    GuestCheckoutRequest, MessageResponse, RoomCreate, RoomViewResponse,
    TaskToggleResponse, ViewToggleRequest, ViewToggleResponse,
)
from housekeeping.security.auth import require_any_role, require_housekeeper, require_manager
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/rooms", tags=["Rooms"])


@router.get("", response_model=List[RoomViewResponse])
def list_rooms(
    q: str = "",
    status: Optional[RoomStatus] = None,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    """Rooms whose number contains q, optionally filtered by status"""
    return store.room_views(q, status)


@router.get("/counts", response_model=Dict[str, int])
def room_status_counts(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.status_counts()


@router.get("/{room_id}", response_model=RoomViewResponse)
def get_room(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.room_view(room_id)


@router.post("", response_model=RoomViewResponse, status_code=status.HTTP_201_CREATED)
def add_room(
    data: RoomCreate,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    room = store.add_room(data.id, data.number, data.room_type, data.floor, data.status)
    return store.room_view(room.id)


@router.post("/{room_id}/tasks", response_model=ChecklistItemResponse, status_code=status.HTTP_201_CREATED)
def add_adhoc_task(
    room_id: str,
    data: AdhocTaskCreate,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """Add a one-off task to a single room"""
    return store.add_adhoc_task(room_id, data.label, data.category)


@router.post("/{room_id}/tasks/{task_id}/toggle", response_model=TaskToggleResponse)
def toggle_task(
    room_id: str,
    task_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    """Complete or un-complete a task; completing needs every earlier task of the category done"""
    item = store.toggle_task(actor, room_id, task_id)
    completed, total = store.progress(room_id)
    return TaskToggleResponse(
        **item.to_dict(),
        progress={"completed": completed, "total": total},
    )


@router.post("/{room_id}/view", response_model=ViewToggleResponse)
def toggle_category_view(
    room_id: str,
    data: ViewToggleRequest,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    """Expand or collapse a task category on the room card"""
    active = store.toggle_view(actor, room_id, data.category)
    return ViewToggleResponse(room_id=room_id, active_category=active)


@router.post("/{room_id}/finish", response_model=CleaningHistoryResponse)
def finish_cleaning(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    return store.finish(actor, room_id)


@router.post("/{room_id}/abandon", response_model=MessageResponse)
def abandon_room(
    room_id: str,
    data: Optional[AbandonRequest] = None,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    """Give up on a room mid-clean; the manager receives an exception message"""
    message = store.abandon(actor, room_id, data.note if data else None)
    return MessageResponse(**message.to_dict(), actionable=True)


@router.post("/{room_id}/guest-checkout", response_model=RoomViewResponse)
def guest_checkout(
    room_id: str,
    data: Optional[GuestCheckoutRequest] = None,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """A guest left an available room: it goes back to checkout with a fresh checklist"""
    store.guest_checkout(room_id, data.expected_status if data else None)
    return store.room_view(room_id)
