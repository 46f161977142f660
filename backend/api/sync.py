"""Google Drive sync endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.deps import get_drive_client_factory, get_session, get_settings
from backend.config import Settings
from backend.drive.client import DriveClient
from backend.schemas.stats import SyncStatusResponse, SyncTriggerResponse
from backend.services.drive_sync_service import run_sync
from backend.services.stats_service import get_sync_status
from backend.services.system_config_service import is_sync_in_progress

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import async_sessionmaker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync", tags=["sync"])


async def _sync_in_background(
    lock: asyncio.Lock,
    session_factory: async_sessionmaker[AsyncSession],
    client_factory: Callable[[Settings], DriveClient],
    settings: Settings,
) -> None:
    """Run one sync, skipping if another one holds the lock."""
    if lock.locked():
        logger.info("Sync already running; skipping duplicate trigger")
        return
    async with lock:
        try:
            client = await asyncio.to_thread(client_factory, settings)
        except Exception as exc:
            logger.error("Failed to create Drive client: %s", exc, exc_info=True)
            return
        result = await run_sync(session_factory, client, settings)
        if not result.success:
            logger.error("Background sync failed: %s", result.error)


@router.post("", response_model=SyncTriggerResponse, status_code=202)
async def trigger_sync(
    request: Request,
    background_tasks: BackgroundTasks,
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
    client_factory: Annotated[
        Callable[[Settings], DriveClient], Depends(get_drive_client_factory)
    ],
) -> SyncTriggerResponse:
    """Start a background sync and return immediately."""
    if not settings.drive_configured:
        raise HTTPException(status_code=503, detail="Google Drive is not configured")

    lock: asyncio.Lock = request.app.state.sync_lock
    if lock.locked() or await is_sync_in_progress(session):
        raise HTTPException(status_code=409, detail="A sync is already in progress")
    # End the read transaction so the background sync can take the write lock
    await session.rollback()

    background_tasks.add_task(
        _sync_in_background,
        lock,
        request.app.state.session_factory,
        client_factory,
        settings,
    )
    logger.info("Scheduled Google Drive sync")
    return SyncTriggerResponse(message="Sync started; check the sync status for progress")


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SyncStatusResponse:
    """Persisted state of the latest sync."""
    return await get_sync_status(session)
