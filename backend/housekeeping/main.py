"""
Housekeeping workflow service - application entry point
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from housekeeping.config import settings
from housekeeping.errors import HousekeepingError
from housekeeping.routers import assignments, catalog, cleaners, history, messages, rooms, sessions
from housekeeping.seed import seed_demo_data
from housekeeping.services.catalog import load_feed_file, normalize_feed
from housekeeping.services.event_handlers import EventHandlers
from housekeeping.services.persistence import StateRepository
from housekeeping.services.store import HousekeepingStore

logger = logging.getLogger(__name__)


def build_store(repository: Optional[StateRepository] = None) -> HousekeepingStore:
    """
    Bootstrap the store: restore persisted state if any, otherwise apply the
    catalog file and demo seed. A catalog file that differs from the restored
    feed is re-ingested.
    """
    store = HousekeepingStore(
        repository=repository,
        session_max_age_hours=settings.SESSION_RESTORE_MAX_AGE_HOURS,
    )
    restored = store.load()

    if settings.TASK_CATALOG_PATH:
        feed = load_feed_file(settings.TASK_CATALOG_PATH)
        if normalize_feed(feed) != store.catalog.feed:
            store.ingest_catalog(feed)
            logger.info(f"Task catalog loaded from {settings.TASK_CATALOG_PATH}")

    if not restored and settings.SEED_DEMO_DATA and store.is_empty():
        seed_demo_data(store)

    store.save()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, build the store, hook up event handlers"""
    logging.basicConfig(level=settings.LOG_LEVEL)

    repository = None
    if settings.PERSIST_STATE:
        from housekeeping.database import SessionLocal, init_db
        from housekeeping.services.persistence import SqlAlchemyStateRepository
        init_db()
        repository = SqlAlchemyStateRepository(SessionLocal)

    app.state.store = build_store(repository)

    handlers = EventHandlers(lambda: getattr(app.state, "store", None))
    handlers.register_handlers()
    logger.info(f"{settings.APP_NAME} started")

    yield

    handlers.unregister_handlers()


app = FastAPI(
    title=settings.APP_NAME,
    description="Room-cleaning workflow: checkout, assignment, cleaning sessions and history",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HousekeepingError)
async def housekeeping_error_handler(request: Request, exc: HousekeepingError):
    if exc.status_code >= 409:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errors": getattr(exc, "errors", None)},
    )


app.include_router(rooms.router)
app.include_router(assignments.router)
app.include_router(sessions.router)
app.include_router(cleaners.router)
app.include_router(messages.router)
app.include_router(history.router)
app.include_router(catalog.router)


@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
