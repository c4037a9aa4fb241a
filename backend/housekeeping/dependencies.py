"""
Shared FastAPI dependencies
"""
from fastapi import Request

from housekeeping.services.store import HousekeepingStore


def get_store(request: Request) -> HousekeepingStore:
    """The application's single HousekeepingStore, created in the lifespan hook"""
    return request.app.state.store
