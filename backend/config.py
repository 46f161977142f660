"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CID checker application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    expose_docs: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///data/db/cidcheck.db"
    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=0, ge=0)

    # Paths
    frontend_dir: Path = Path("./frontend")

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    # CORS
    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=list)
    trusted_proxy_ips: list[str] = Field(default_factory=list)

    # Google Drive OAuth (single static refresh token)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_token_uri: str = "https://oauth2.googleapis.com/token"

    # Drive sync
    drive_root_id: str = ""
    drive_target_folder_path: str = "/"
    drive_page_size: int = Field(default=100, ge=1, le=1000)
    drive_max_depth: int | None = Field(default=None, ge=0)

    # CID checks
    cid_batch_limit: int = Field(default=1000, ge=1)

    @property
    def drive_configured(self) -> bool:
        """Whether all Drive OAuth credentials are present."""
        return bool(
            self.google_client_id and self.google_client_secret and self.google_refresh_token
        )

    def validate_runtime_config(self) -> None:
        """Reject configurations that can only fail at sync time."""
        credentials = {
            "GOOGLE_CLIENT_ID": self.google_client_id,
            "GOOGLE_CLIENT_SECRET": self.google_client_secret,
            "GOOGLE_REFRESH_TOKEN": self.google_refresh_token,
        }
        missing = [name for name, value in credentials.items() if not value]
        if missing and len(missing) < len(credentials):
            joined = ", ".join(missing)
            raise ValueError(f"Incomplete Google Drive configuration: missing {joined}")
