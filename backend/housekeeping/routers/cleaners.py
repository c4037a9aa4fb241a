"""
Cleaner directory routes (manager)
"""
from typing import List

from fastapi import APIRouter, Depends, status

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor
from housekeeping.models.schemas import CleanerProfile, CleanerResponse, DeactivateResponse
from housekeeping.security.auth import require_any_role, require_manager
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/cleaners", tags=["Cleaners"])


@router.get("", response_model=List[CleanerResponse])
def list_cleaners(
    active_only: bool = False,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.cleaners(active_only)


@router.get("/{cleaner_id}", response_model=CleanerResponse)
def get_cleaner(
    cleaner_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.cleaner(cleaner_id)


@router.post("", response_model=CleanerResponse, status_code=status.HTTP_201_CREATED)
def create_cleaner(
    data: CleanerProfile,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    return store.create_cleaner(data.model_dump())


@router.put("/{cleaner_id}", response_model=CleanerResponse)
def update_cleaner(
    cleaner_id: str,
    data: CleanerProfile,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """Replace a profile. active=false here keeps room assignments; use deactivate for cleanup"""
    return store.update_cleaner(cleaner_id, data.model_dump())


@router.post("/{cleaner_id}/deactivate", response_model=DeactivateResponse)
def deactivate_cleaner(
    cleaner_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    cleaner, unassigned = store.deactivate_cleaner(cleaner_id)
    return DeactivateResponse(cleaner=cleaner.to_dict(), unassigned_room_ids=unassigned)
