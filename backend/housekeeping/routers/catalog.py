"""
Task catalog routes
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from housekeeping.dependencies import get_store
from housekeeping.models.domain import Actor
from housekeeping.models.schemas import CatalogIngestResponse, CatalogResponse
from housekeeping.security.auth import require_any_role, require_manager
from housekeeping.services.store import HousekeepingStore

router = APIRouter(prefix="/housekeeping/catalog", tags=["Task Catalog"])


@router.get("", response_model=CatalogResponse)
def get_catalog(
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_any_role)
):
    return store.catalog_view()


@router.put("", response_model=CatalogIngestResponse)
def ingest_catalog(
    feed: Dict[str, Any] = Body(...),
    store: HousekeepingStore = Depends(get_store),
    actor: Actor = Depends(require_manager)
):
    """
    Replace the manager task feed: {category: {tasks: [...], roomTypes: [...]}}.
    A bare list of labels is accepted for a category and means unrestricted.
    """
    return CatalogIngestResponse(version=store.ingest_catalog(feed))
