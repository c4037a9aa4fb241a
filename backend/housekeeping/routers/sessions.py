"""
Housekeeper session routes - room selection and proceed
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor
from housekeeping.models.schemas import (
    DeselectRequest, MessageResponse, RoomViewResponse, SessionResponse,
)
from housekeeping.security.auth import require_housekeeper
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/session", tags=["Housekeeper Session"])


@router.get("", response_model=SessionResponse)
def get_session(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    return store.session_view(actor.id)


@router.post("/select/{room_id}", response_model=SessionResponse)
def select_room(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    store.select_room(actor, room_id)
    return store.session_view(actor.id)


@router.post("/deselect/{room_id}", response_model=Optional[MessageResponse])
def deselect_room(
    room_id: str,
    data: Optional[DeselectRequest] = None,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    """
    Remove a room from the selection. A room already in cleaning is
    abandoned, and the exception message sent to the manager is returned.
    """
    message = store.deselect_room(actor, room_id, data.note if data else None)
    if message is None:
        return None
    return MessageResponse(**message.to_dict(), actionable=True)


@router.post("/proceed", response_model=List[RoomViewResponse])
def proceed(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_housekeeper)
):
    """Start cleaning every selected room at once"""
    rooms = store.proceed(actor)
    return [store.room_view(room.id) for room in rooms]
