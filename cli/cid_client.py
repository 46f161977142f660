"""Command-line client for the CID checker HTTP API."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx

_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


def validate_server_url(server_url: str, allow_insecure_http: bool = False) -> str:
    """Validate server URL and enforce HTTPS for non-localhost hosts by default."""
    normalized = server_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Server URL must include scheme and host (e.g. https://example.com)")

    hostname = parsed.hostname
    if parsed.scheme == "http" and not allow_insecure_http and hostname not in _LOCALHOST_HOSTS:
        raise ValueError(
            "HTTPS is required for non-localhost servers. "
            "Use --allow-insecure-http only on trusted networks."
        )

    return normalized


def read_cids(values: list[str], file: str | None) -> list[str]:
    """Collect CIDs from arguments and an optional file (``-`` for stdin)."""
    cids = [v.strip() for v in values if v.strip()]
    if file is not None:
        text = sys.stdin.read() if file == "-" else Path(file).read_text(encoding="utf-8")
        cids.extend(line.strip() for line in text.splitlines() if line.strip())
    return cids


class CidClient:
    """Thin HTTP client for the CID checker API."""

    def __init__(self, server_url: str, timeout: float = 60.0) -> None:
        self.server_url = server_url.rstrip("/")
        self.client = httpx.Client(base_url=self.server_url, timeout=timeout)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> CidClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _get(self, path: str, **params: Any) -> Any:
        resp = self.client.get(path, params={k: v for k, v in params.items() if v is not None})
        resp.raise_for_status()
        return resp.json()

    def health(self) -> dict[str, Any]:
        result: dict[str, Any] = self._get("/api/health")
        return result

    def stats(self) -> dict[str, Any]:
        result: dict[str, Any] = self._get("/api/stats")
        return result

    def files(self, page: int = 1, limit: int = 50, search: str | None = None) -> dict[str, Any]:
        result: dict[str, Any] = self._get("/api/files", page=page, limit=limit, search=search)
        return result

    def check(self, cids: list[str]) -> dict[str, Any]:
        """Submit a batch of CIDs for checking."""
        resp = self.client.post("/api/check-cids", json={"cids": cids})
        resp.raise_for_status()
        result: dict[str, Any] = resp.json()
        return result

    def sync(self) -> dict[str, Any]:
        """Trigger a background Drive sync."""
        resp = self.client.post("/api/sync")
        resp.raise_for_status()
        result: dict[str, Any] = resp.json()
        return result


def print_check_result(result: dict[str, Any]) -> None:
    for item in result.get("found", []):
        paths = ", ".join(f["file_path"] for f in item.get("files", []))
        print(f"  FOUND     {item['cid']}  {paths}")
    for cid in result.get("not_found", []):
        print(f"  NOT FOUND {cid}")
    print(
        f"{result.get('total', 0)} checked: {result.get('found_count', 0)} found, "
        f"{result.get('not_found_count', 0)} not found."
    )


def _error_detail(exc: httpx.HTTPStatusError) -> str:
    try:
        detail = exc.response.json().get("detail")
    except ValueError:
        detail = None
    if isinstance(detail, list):
        detail = "; ".join(str(e.get("message", e)) for e in detail)
    return f"{exc.response.status_code} {detail or exc.response.reason_phrase}"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cidcheck-client",
        description="Query a CID checker server",
    )
    parser.add_argument(
        "--server", "-s", default="http://localhost:3000", help="Server URL"
    )
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// server URLs for non-localhost hosts",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("health", help="Check server health")
    subparsers.add_parser("stats", help="Show aggregate statistics")
    subparsers.add_parser("sync", help="Trigger a Google Drive sync")

    check_parser = subparsers.add_parser("check", help="Check CIDs against file names")
    check_parser.add_argument("cids", nargs="*", help="CIDs to check")
    check_parser.add_argument("--file", "-f", help="File with one CID per line ('-' for stdin)")

    files_parser = subparsers.add_parser("files", help="List synced files")
    files_parser.add_argument("--page", type=int, default=1)
    files_parser.add_argument("--limit", type=int, default=50)
    files_parser.add_argument("--search", help="Filter by name or path substring")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    try:
        server_url = validate_server_url(args.server, args.allow_insecure_http)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    with CidClient(server_url) as client:
        try:
            if args.command == "health":
                health = client.health()
                print(f"{health['status']} (version {health['version']}, db {health['database']})")
            elif args.command == "stats":
                for key, value in client.stats().items():
                    print(f"  {key}: {value}")
            elif args.command == "sync":
                print(client.sync()["message"])
            elif args.command == "check":
                cids = read_cids(args.cids, args.file)
                if not cids:
                    print("Error: no CIDs given")
                    sys.exit(1)
                print_check_result(client.check(cids))
            elif args.command == "files":
                data = client.files(args.page, args.limit, args.search)
                for f in data["files"]:
                    print(f"  {f['modified_time'] or '-':<32} {f['file_path']}")
                p = data["pagination"]
                print(f"Page {p['page']} of {p['total_pages']} ({p['total']} files)")
        except httpx.HTTPStatusError as exc:
            print(f"Error: {_error_detail(exc)}")
            sys.exit(1)
        except httpx.HTTPError as exc:
            print(f"Error: {exc}")
            sys.exit(1)


if __name__ == "__main__":
    main()
