"""
Assignment routes - propose / accept / reject, reassignment options, bulk assign
"""
from typing import List

from fastapi import APIRouter, Depends, status

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor
from housekeeping.models.schemas import (
    ActiveCleanerResponse, BulkAssignRequest, CleanerResponse, ProposalCreate,
    ProposalResponse, RoomViewResponse,
)
from housekeeping.security.auth import require_any_role, require_manager
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/assignments", tags=["Assignments"])


@router.get("/proposals", response_model=List[ProposalResponse])
def list_proposals(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.proposals()


@router.post("/proposals", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def propose_assignment(
    data: ProposalCreate,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """
    Propose a cleaner for a room. Checkout rooms get a first assignment,
    assigned or in-cleaning rooms a reassignment. Nothing changes until accept.
    """
    return store.propose(data.room_id, data.cleaner_id, data.expected_status)


@router.post("/proposals/{room_id}/accept", response_model=RoomViewResponse)
def accept_proposal(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    store.accept(room_id, actor)
    return store.room_view(room_id)


@router.post("/proposals/{room_id}/reject", response_model=List[CleanerResponse])
def reject_proposal(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    """Decline the proposal; returns the cleaners that may be proposed instead"""
    store.reject(room_id, actor)
    return store.reassignment_options(room_id)


@router.get("/options/{room_id}", response_model=List[CleanerResponse])
def reassignment_options(
    room_id: str,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    return store.reassignment_options(room_id)


@router.post("/bulk", response_model=List[RoomViewResponse])
def bulk_assign(
    data: BulkAssignRequest,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """Assign several checkout rooms to one cleaner; all or nothing"""
    rooms = store.bulk_assign(data.room_ids, data.cleaner_id)
    return [store.room_view(room.id) for room in rooms]


@router.get("/active-cleaners", response_model=List[ActiveCleanerResponse])
def active_cleaners(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """Active cleaners with the rooms they currently hold"""
    return store.active_cleaners()
