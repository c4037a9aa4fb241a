"""
History reporting routes
Housekeepers only ever see their own records.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor, ActorRole
from housekeeping.models.schemas import CleaningHistoryResponse, RoomHistoryResponse
from housekeeping.security.auth import require_any_role
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/history", tags=["History"])


@router.get("/cleaning", response_model=List[CleaningHistoryResponse])
def cleaning_history(
    housekeeper_id: Optional[str] = None,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    """Completed cleanings, newest first"""
    if actor.role == ActorRole.HOUSEKEEPER:
        housekeeper_id = actor.id
    return store.cleaning_history(housekeeper_id)


@router.get("/rooms/{cleaner_id}", response_model=List[RoomHistoryResponse])
def room_history(
    cleaner_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    if actor.role == ActorRole.HOUSEKEEPER and actor.id != cleaner_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions"
        )
    store.cleaner(cleaner_id)
    return store.room_history(cleaner_id)
