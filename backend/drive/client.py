"""Google Drive v3 client: paginated listing and folder path resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from googleapiclient.errors import HttpError

from backend.exceptions import DriveError, FolderNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from backend.config import Settings

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
_ITEM_FIELDS = "id, name, size, mimeType, modifiedTime"


@dataclass
class DriveItem:
    """A child entry of a Drive folder as returned by ``files.list``."""

    id: str
    name: str
    mime_type: str
    size: int | None = None
    modified_time: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DriveItem:
        size = data.get("size")
        return cls(
            id=data["id"],
            name=data["name"],
            mime_type=data.get("mimeType", ""),
            size=int(size) if size is not None else None,
            modified_time=data.get("modifiedTime"),
        )


def escape_query_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient:
    """Thin wrapper over a Drive v3 ``Resource``.

    All methods are blocking; async callers run them in a worker thread.
    """

    def __init__(self, service: Any, root_id: str = "", page_size: int = 100) -> None:
        self.service = service
        self.root_id = root_id or "root"
        self.page_size = page_size

    def _files_list(self, **params: Any) -> dict[str, Any]:
        try:
            response: dict[str, Any] = (
                self.service.files()
                .list(supportsAllDrives=True, includeItemsFromAllDrives=True, **params)
                .execute()
            )
        except HttpError as exc:
            raise DriveError(f"Drive files.list failed: {exc}") from exc
        return response

    def list_children(
        self, folder_id: str, page_token: str | None = None
    ) -> tuple[list[DriveItem], str | None]:
        """Return one page of non-trashed children and the continuation token."""
        params: dict[str, Any] = {
            "q": f"'{escape_query_literal(folder_id)}' in parents and trashed = false",
            "pageSize": self.page_size,
            "fields": f"nextPageToken, files({_ITEM_FIELDS})",
        }
        if page_token:
            params["pageToken"] = page_token
        response = self._files_list(**params)
        items = [DriveItem.from_api(f) for f in response.get("files", [])]
        return items, response.get("nextPageToken")

    def iter_children(self, folder_id: str) -> Iterator[DriveItem]:
        """Yield every non-trashed child, following pagination tokens."""
        page_token: str | None = None
        while True:
            items, page_token = self.list_children(folder_id, page_token)
            yield from items
            if not page_token:
                break

    def find_child_folder(self, parent_id: str, name: str) -> str | None:
        """Return the id of the child folder called ``name``, if any."""
        query = (
            f"name = '{escape_query_literal(name)}'"
            f" and '{escape_query_literal(parent_id)}' in parents"
            f" and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        response = self._files_list(q=query, fields="files(id, name)")
        files = response.get("files", [])
        if not files:
            return None
        folder_id: str = files[0]["id"]
        return folder_id

    def resolve_folder_path(self, folder_path: str) -> str:
        """Walk a slash-separated path from the root, one segment at a time."""
        current_id = self.root_id
        for segment in (part for part in folder_path.split("/") if part):
            child_id = self.find_child_folder(current_id, segment)
            if child_id is None:
                raise FolderNotFoundError(segment, current_id)
            current_id = child_id
        return current_id


def build_drive_client(settings: Settings) -> DriveClient:
    """Create a Drive client authorized by the configured refresh token."""
    from google.oauth2.credentials import Credentials
    from googleapiclient.discovery import build

    if not settings.drive_configured:
        raise DriveError("Google Drive credentials are not configured")

    credentials = Credentials(
        token=None,
        refresh_token=settings.google_refresh_token,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        token_uri=settings.google_token_uri,
        scopes=[DRIVE_READONLY_SCOPE],
    )
    service = build("drive", "v3", credentials=credentials, cache_discovery=False)
    logger.debug("Built Drive v3 service (root=%s)", settings.drive_root_id or "root")
    return DriveClient(
        service,
        root_id=settings.drive_root_id,
        page_size=settings.drive_page_size,
    )
