"""Key-value system state: sync flag, last sync time, counters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from backend.models.system_config import SystemConfig

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

LAST_SYNC_TIME = "last_sync_time"
SYNC_IN_PROGRESS = "sync_in_progress"
TOTAL_FILES_SYNCED = "total_files_synced"
LAST_SYNC_ERROR = "last_sync_error"

DEFAULT_CONFIG: dict[str, tuple[str | None, str]] = {
    LAST_SYNC_TIME: (None, "Time of the last successful Google Drive sync"),
    SYNC_IN_PROGRESS: ("false", "Whether a sync is currently running"),
    TOTAL_FILES_SYNCED: ("0", "Number of files written by the last sync"),
    LAST_SYNC_ERROR: (None, "Error message of the last failed sync"),
}


async def get_config_value(session: AsyncSession, key: str) -> str | None:
    """Return the value stored under ``key``, or None if unset."""
    stmt = select(SystemConfig.config_value).where(SystemConfig.config_key == key)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def set_config_value(session: AsyncSession, key: str, value: str | None) -> None:
    """Overwrite ``key`` with ``value``, creating the row if needed.

    Does not commit; the caller owns the transaction.
    """
    stmt = select(SystemConfig).where(SystemConfig.config_key == key)
    row = (await session.execute(stmt)).scalar_one_or_none()
    if row is None:
        description = DEFAULT_CONFIG.get(key, (None, None))[1]
        session.add(SystemConfig(config_key=key, config_value=value, description=description))
    else:
        row.config_value = value
    await session.flush()


async def ensure_default_config(session: AsyncSession) -> None:
    """Insert missing default keys without touching existing values."""
    result = await session.execute(select(SystemConfig.config_key))
    existing = set(result.scalars().all())
    for key, (value, description) in DEFAULT_CONFIG.items():
        if key not in existing:
            session.add(SystemConfig(config_key=key, config_value=value, description=description))
    await session.commit()


async def is_sync_in_progress(session: AsyncSession) -> bool:
    """Whether the persisted sync flag is set."""
    return await get_config_value(session, SYNC_IN_PROGRESS) == "true"


async def reset_sync_flag(session: AsyncSession) -> None:
    """Clear the sync flag and commit."""
    await set_config_value(session, SYNC_IN_PROGRESS, "false")
    await session.commit()
