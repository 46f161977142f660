"""Application-level exception types.

Convention:
- ``InternalServerError`` - for errors whose details must never reach clients
  (configuration problems, infrastructure failures, etc.). The global handler
  logs the full message at ERROR and returns a generic "Internal server error"
  (500) to the client.
- ``ValueError`` - for *business logic* validation errors that are safe to
  forward to clients (empty CID batches, bad input formats, etc.). The global
  ``ValueError`` handler returns ``str(exc)`` as the 422 detail.
- ``DriveError`` - for failures talking to Google Drive. These only occur
  inside the background sync, so they are logged rather than returned.
"""

from __future__ import annotations


class InternalServerError(Exception):
    """Raised for internal errors whose details must not be exposed to clients.

    The global exception handler in ``backend/main.py`` catches this, logs
    the full message server-side, and returns HTTP 500 with a generic
    ``"Internal server error"`` detail.
    """


class DriveError(Exception):
    """Raised when the Google Drive API cannot satisfy a request."""


class FolderNotFoundError(DriveError):
    """Raised when a segment of the target folder path does not exist."""

    def __init__(self, segment: str, parent_id: str) -> None:
        super().__init__(f"Folder '{segment}' not found under {parent_id}")
        self.segment = segment
        self.parent_id = parent_id
