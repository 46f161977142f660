"""Mirror a Google Drive folder tree into the files table."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select

from backend.database import begin_write
from backend.models.file import FileRecord
from backend.services.cid_service import refresh_unmatched_cids
from backend.services.datetime_service import now_utc, parse_optional_datetime
from backend.services.system_config_service import (
    LAST_SYNC_ERROR,
    LAST_SYNC_TIME,
    SYNC_IN_PROGRESS,
    TOTAL_FILES_SYNCED,
    reset_sync_flag,
    set_config_value,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from backend.config import Settings
    from backend.drive.client import DriveClient

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 100


@dataclass
class DriveFile:
    """A non-folder Drive item flattened with its path below the sync root."""

    id: str
    name: str
    path: str
    size: int | None
    mime_type: str
    modified_time: str | None


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    success: bool
    total_files: int = 0
    synced_files: int = 0
    message: str = ""
    error: str | None = None


def collect_files(
    client: DriveClient,
    folder_id: str,
    path: str = "",
    *,
    max_depth: int | None = None,
    _depth: int = 0,
    _acc: list[DriveFile] | None = None,
) -> list[DriveFile]:
    """Recursively list every file below ``folder_id``.

    Folders are descended into; the remote hierarchy is assumed acyclic.
    Folders deeper than ``max_depth`` are skipped.
    """
    files: list[DriveFile] = [] if _acc is None else _acc
    for item in client.iter_children(folder_id):
        item_path = f"{path}/{item.name}" if path else item.name
        if item.is_folder:
            if max_depth is not None and _depth >= max_depth:
                logger.warning("Skipping folder %s: deeper than %d levels", item_path, max_depth)
                continue
            collect_files(
                client,
                item.id,
                item_path,
                max_depth=max_depth,
                _depth=_depth + 1,
                _acc=files,
            )
        else:
            files.append(
                DriveFile(
                    id=item.id,
                    name=item.name,
                    path=item_path,
                    size=item.size,
                    mime_type=item.mime_type,
                    modified_time=item.modified_time,
                )
            )
    return files


async def upsert_file(session: AsyncSession, drive_file: DriveFile) -> FileRecord:
    """Insert a file or update the existing row with the same Drive id."""
    stmt = select(FileRecord).where(FileRecord.file_id == drive_file.id)
    record = (await session.execute(stmt)).scalar_one_or_none()
    modified_time = parse_optional_datetime(drive_file.modified_time)
    if record is None:
        record = FileRecord(
            file_id=drive_file.id,
            file_name=drive_file.name,
            file_path=drive_file.path,
            file_size=drive_file.size,
            mime_type=drive_file.mime_type,
            modified_time=modified_time,
        )
        session.add(record)
    else:
        record.file_name = drive_file.name
        record.file_path = drive_file.path
        record.file_size = drive_file.size
        record.mime_type = drive_file.mime_type
        record.modified_time = modified_time
        record.updated_time = now_utc()
    await session.flush()
    return record


async def upsert_files(session: AsyncSession, files: list[DriveFile]) -> int:
    """Upsert all files, skipping the ones that fail.

    Each file gets its own savepoint so a failure rolls back only that file.
    Returns the number of files written.
    """
    synced = 0
    for drive_file in files:
        try:
            async with session.begin_nested():
                await upsert_file(session, drive_file)
        except Exception as exc:
            logger.error("Failed to sync file %s (%s): %s", drive_file.name, drive_file.id, exc)
            continue
        synced += 1
        if synced % _PROGRESS_EVERY == 0:
            logger.info("Synced %d files...", synced)
    return synced


async def _mark_sync_started(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        await begin_write(session)
        await set_config_value(session, SYNC_IN_PROGRESS, "true")
        await session.commit()


async def _mark_sync_failed(
    session_factory: async_sessionmaker[AsyncSession], message: str
) -> None:
    try:
        async with session_factory() as session:
            await begin_write(session)
            await set_config_value(session, LAST_SYNC_ERROR, message)
            await reset_sync_flag(session)
    except Exception as exc:
        logger.error("Failed to reset sync state: %s", exc, exc_info=True)


async def run_sync(
    session_factory: async_sessionmaker[AsyncSession],
    client: DriveClient,
    settings: Settings,
) -> SyncResult:
    """Run a full sync of the configured Drive folder.

    Never raises: failures roll back pending writes, clear the in-progress
    flag, and are reported in the returned result.
    """
    logger.info("Starting Google Drive sync of %s", settings.drive_target_folder_path)
    try:
        await _mark_sync_started(session_factory)

        folder_id = await asyncio.to_thread(
            client.resolve_folder_path, settings.drive_target_folder_path
        )
        logger.info("Target folder id: %s", folder_id)

        files = await asyncio.to_thread(
            collect_files, client, folder_id, max_depth=settings.drive_max_depth
        )
        logger.info("Found %d files", len(files))

        async with session_factory() as session:
            try:
                await begin_write(session)
                synced = await upsert_files(session, files)
                await refresh_unmatched_cids(session)
                await set_config_value(session, LAST_SYNC_TIME, now_utc().isoformat())
                await set_config_value(session, TOTAL_FILES_SYNCED, str(synced))
                await set_config_value(session, LAST_SYNC_ERROR, None)
                await set_config_value(session, SYNC_IN_PROGRESS, "false")
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    except Exception as exc:
        logger.error("Google Drive sync failed: %s", exc, exc_info=True)
        await _mark_sync_failed(session_factory, str(exc) or exc.__class__.__name__)
        return SyncResult(success=False, error=str(exc), message="Sync failed")

    logger.info("Sync complete: %d of %d files synced", synced, len(files))
    return SyncResult(
        success=True,
        total_files=len(files),
        synced_files=synced,
        message="Sync complete",
    )
