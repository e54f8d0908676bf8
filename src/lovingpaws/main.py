"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from lovingpaws import __version__
from lovingpaws.api.routes import router
from lovingpaws.core.config import settings
from lovingpaws.core.errors import ConstraintViolation, NotInitialized, StorageUnavailable
from lovingpaws.services.remote import HttpRemoteStore
from lovingpaws.services.store import LocalStore
from lovingpaws.services.sync import SyncService

logger = structlog.get_logger()

scheduler = AsyncIOScheduler()


async def sync_with_remote(store: LocalStore, remote: HttpRemoteStore) -> None:
    """Periodic task to replicate the sync queue and pull remote changes."""
    if not store.is_initialized:
        logger.warning("sync_skipped", reason="store not initialized")
        return
    if not await remote.is_online():
        logger.info("sync_skipped", reason="remote offline")
        return

    report = await SyncService(store, remote).sync()
    logger.info(
        "sync_completed",
        pushed=report.pushed,
        failed=report.failed,
        skipped=report.skipped,
        pulled=report.pulled,
    )


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


async def constraint_violation_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map store errors to HTTP responses."""
    app.add_exception_handler(NotInitialized, store_unavailable_handler)
    app.add_exception_handler(StorageUnavailable, store_unavailable_handler)
    app.add_exception_handler(ConstraintViolation, constraint_violation_handler)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting LovingPaws", version=__version__)

    store = LocalStore(settings.database_url)
    remote = HttpRemoteStore()
    app.state.store = store
    app.state.remote = remote

    try:
        await store.initialize()
    except StorageUnavailable:
        # Each request retries initialization and answers 503 until it succeeds
        logger.exception("Local store unavailable at startup")

    if settings.sync_enabled and remote.configured:
        scheduler.add_job(
            sync_with_remote,
            "interval",
            minutes=settings.sync_interval_minutes,
            id="sync_with_remote",
            args=[store, remote],
        )
        scheduler.start()
        logger.info(
            "Scheduler started",
            sync_interval_minutes=settings.sync_interval_minutes,
        )

    yield

    # Shutdown
    if scheduler.running:
        scheduler.shutdown()
    await store.close()
    logger.info("LovingPaws shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Offline-first pet health records with background cloud sync",
    lifespan=lifespan,
)

app.include_router(router)
register_exception_handlers(app)
