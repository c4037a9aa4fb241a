"""
Exception message routes (manager)
"""
from typing import List

from fastapi import APIRouter, Depends, status

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor
from housekeeping.models.schemas import MessageReassignRequest, MessageResponse, ProposalResponse
from housekeeping.security.auth import require_manager
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/messages", tags=["Messages"])


@router.get("", response_model=List[MessageResponse])
def list_messages(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """Messages in arrival order; actionable while the room still waits in checkout"""
    return store.message_views()


@router.post("/{message_id}/reassign", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def reassign_from_message(
    message_id: str,
    data: MessageReassignRequest,
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    return store.reassign_from_message(message_id, data.cleaner_id)
