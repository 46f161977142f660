"""Tests for the global exception handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from backend.main import create_app
from tests.conftest import create_test_client

if TYPE_CHECKING:
    from backend.config import Settings


class TestErrorHandlers:
    @pytest.mark.asyncio
    async def test_runtime_error_is_500(self, test_settings: Settings) -> None:
        async with create_test_client(test_settings) as client:
            with patch(
                "backend.api.stats.get_stats",
                new_callable=AsyncMock,
                side_effect=RuntimeError("boom"),
            ):
                resp = await client.get("/api/stats")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Internal processing error"

    @pytest.mark.asyncio
    async def test_operational_error_is_503(self, test_settings: Settings) -> None:
        async with create_test_client(test_settings) as client:
            with patch(
                "backend.api.files.list_files",
                new_callable=AsyncMock,
                side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
            ):
                resp = await client.get("/api/files")

        assert resp.status_code == 503
        assert resp.json()["detail"] == "Database temporarily unavailable"

    @pytest.mark.asyncio
    async def test_value_error_is_422(self, test_settings: Settings) -> None:
        async with create_test_client(test_settings) as client:
            with patch(
                "backend.api.cids.check_cids",
                new_callable=AsyncMock,
                side_effect=ValueError("bad batch"),
            ):
                resp = await client.post("/api/check-cids", json={"cids": ["A-1"]})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "bad batch"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, test_settings: Settings) -> None:
        async with create_test_client(test_settings, raise_app_exceptions=False) as client:
            with patch(
                "backend.api.cids.list_query_history",
                new_callable=AsyncMock,
                side_effect=KeyError("missing"),
            ):
                resp = await client.get("/api/history")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_unknown_api_route_is_404(self, test_settings: Settings) -> None:
        async with create_test_client(test_settings) as client:
            resp = await client.get("/api/does-not-exist")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_uninitialized_database_is_opaque_500(self, test_settings: Settings) -> None:
        app = create_app(test_settings)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.get("/api/stats")

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Internal server error"
