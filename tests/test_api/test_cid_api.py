"""Integration tests for the CID check, file, stats and history endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.conftest import create_test_client

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from httpx import AsyncClient

    from backend.config import Settings
    from tests.drive_fakes import FakeDriveService


@pytest.fixture
def library(drive: FakeDriveService) -> FakeDriveService:
    """Drive holding a small movie library."""
    movies = drive.add_folder("movies", "Movies")
    drive.add_file("m1", "ABC-123.mp4", movies, modified_time="2026-01-01T00:00:00Z")
    drive.add_file("m2", "ABC-123 (remux).mkv", movies, modified_time="2026-01-02T00:00:00Z")
    drive.add_file("m3", "XYZ-999.mp4", movies, modified_time="2026-01-03T00:00:00Z")
    drive.add_file("r1", "readme.txt", modified_time="2026-01-04T00:00:00Z")
    return drive


@pytest.fixture
async def client(
    test_settings: Settings, library: FakeDriveService
) -> AsyncGenerator[AsyncClient]:
    """Client whose database has already been synced from ``library``."""
    async with create_test_client(test_settings, library) as ac:
        resp = await ac.post("/api/sync")
        assert resp.status_code == 202
        yield ac


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_ok(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["database"] == "ok"
        assert data["version"]

    @pytest.mark.asyncio
    async def test_security_headers(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestCheckCids:
    @pytest.mark.asyncio
    async def test_found_and_not_found(self, client: AsyncClient) -> None:
        resp = await client.post("/api/check-cids", json={"cids": ["ABC-123", "NOPE-1"]})

        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 2
        assert data["found_count"] == 1
        assert data["not_found_count"] == 1
        assert data["not_found"] == ["NOPE-1"]
        found = data["found"][0]
        assert found["cid"] == "ABC-123"
        assert {f["file_path"] for f in found["files"]} == {
            "Movies/ABC-123.mp4",
            "Movies/ABC-123 (remux).mkv",
        }

    @pytest.mark.asyncio
    async def test_blank_entries_are_dropped(self, client: AsyncClient) -> None:
        resp = await client.post("/api/check-cids", json={"cids": [" XYZ-999 ", "", "XYZ-999"]})
        assert resp.status_code == 200
        assert resp.json()["total"] == 1
        assert resp.json()["found_count"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cids", [[], [""], ["   ", "\t"]])
    async def test_empty_batch_rejected(self, client: AsyncClient, cids: list[str]) -> None:
        resp = await client.post("/api/check-cids", json={"cids": cids})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["field"] == "cids"

    @pytest.mark.asyncio
    async def test_missing_body_field_rejected(self, client: AsyncClient) -> None:
        resp = await client.post("/api/check-cids", json={"ids": ["ABC-123"]})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_overlong_cid_rejected(self, client: AsyncClient) -> None:
        resp = await client.post("/api/check-cids", json={"cids": ["A" * 51]})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_batch_limit(self, test_settings: Settings, drive: FakeDriveService) -> None:
        test_settings.cid_batch_limit = 2
        async with create_test_client(test_settings, drive) as ac:
            resp = await ac.post("/api/check-cids", json={"cids": ["A-1", "B-2", "C-3"]})
        assert resp.status_code == 422
        assert "At most 2" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_history_records_client_ip(self, client: AsyncClient) -> None:
        await client.post("/api/check-cids", json={"cids": ["ABC-123"]})
        await client.post("/api/check-cids", json={"cids": ["NOPE-1", "NOPE-2"]})

        resp = await client.get("/api/history", params={"limit": 10})

        assert resp.status_code == 200
        history = resp.json()
        assert [h["query_text"] for h in history] == ["NOPE-1,NOPE-2", "ABC-123"]
        assert history[0]["not_found_cids"] == 2
        assert history[1]["found_cids"] == 1
        assert history[0]["ip_address"]

    @pytest.mark.asyncio
    async def test_forwarded_for_ignored_from_untrusted_peer(self, client: AsyncClient) -> None:
        await client.post(
            "/api/check-cids",
            json={"cids": ["ABC-123"]},
            headers={"X-Forwarded-For": "203.0.113.7"},
        )
        history = (await client.get("/api/history")).json()
        assert history[0]["ip_address"] != "203.0.113.7"

    @pytest.mark.asyncio
    async def test_history_limit_bounds(self, client: AsyncClient) -> None:
        assert (await client.get("/api/history", params={"limit": 0})).status_code == 422
        assert (await client.get("/api/history", params={"limit": 201})).status_code == 422


class TestFiles:
    @pytest.mark.asyncio
    async def test_lists_newest_first(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files")
        assert resp.status_code == 200
        data = resp.json()
        assert [f["file_id"] for f in data["files"]] == ["r1", "m3", "m2", "m1"]
        assert data["pagination"] == {"page": 1, "limit": 50, "total": 4, "total_pages": 1}

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files", params={"page": 2, "limit": 3})
        data = resp.json()
        assert [f["file_id"] for f in data["files"]] == ["m1"]
        assert data["pagination"]["total_pages"] == 2

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient) -> None:
        resp = await client.get("/api/files", params={"search": "Movies"})
        assert resp.json()["pagination"]["total"] == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 501}])
    async def test_invalid_paging(self, client: AsyncClient, params: dict[str, int]) -> None:
        resp = await client.get("/api/files", params=params)
        assert resp.status_code == 422


class TestStats:
    @pytest.mark.asyncio
    async def test_counts(self, client: AsyncClient) -> None:
        await client.post("/api/check-cids", json={"cids": ["ABC-123", "NOPE-1", "NOPE-2"]})

        resp = await client.get("/api/stats")

        assert resp.status_code == 200
        data = resp.json()
        assert data["total_files"] == 4
        assert data["total_cids"] == 3
        assert data["found_cids"] == 1
        assert data["not_found_cids"] == 2
        assert data["total_files_synced"] == 4
        assert data["sync_in_progress"] is False
        assert data["last_sync_time"] is not None
