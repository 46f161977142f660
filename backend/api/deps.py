"""Shared API dependencies: settings, DB session, Drive client factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import TYPE_CHECKING

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import Settings
from backend.exceptions import InternalServerError

if TYPE_CHECKING:
    from backend.drive.client import DriveClient


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


async def get_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """Get a database session."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise InternalServerError("Database session factory is not initialized")
    async with session_factory() as session:
        yield session


def get_drive_client_factory(request: Request) -> Callable[[Settings], DriveClient]:
    """Get the callable that builds a Drive client from settings."""
    factory: Callable[[Settings], DriveClient] = request.app.state.drive_client_factory
    return factory


def get_client_ip(request: Request) -> str:
    """Source address of the request, honoring X-Forwarded-For from trusted proxies."""
    peer = request.client.host if request.client and request.client.host else None
    settings: Settings = request.app.state.settings
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for and peer in settings.trusted_proxy_ips:
        return forwarded_for.split(",", maxsplit=1)[0].strip()
    return peer or "unknown"
