"""One-time Google OAuth consent that prints a Drive refresh token."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from google_auth_oauthlib.flow import InstalledAppFlow

from backend.drive.client import DRIVE_READONLY_SCOPE


def obtain_refresh_token(client_secrets: Path, port: int = 0) -> str:
    """Run the installed-app flow in a local browser and return the refresh token."""
    flow = InstalledAppFlow.from_client_secrets_file(str(client_secrets), [DRIVE_READONLY_SCOPE])
    creds = flow.run_local_server(port=port, access_type="offline", prompt="consent")
    if not creds.refresh_token:
        raise RuntimeError("Google did not return a refresh token; revoke access and retry")
    token: str = creds.refresh_token
    return token


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="cidcheck-drive-auth",
        description="Authorize read-only Drive access and print the refresh token",
    )
    parser.add_argument(
        "--client-secrets",
        "-c",
        default="credentials.json",
        help="OAuth client secrets JSON downloaded from Google Cloud console",
    )
    parser.add_argument("--port", type=int, default=0, help="Local redirect port (0 = any)")
    args = parser.parse_args(argv)

    client_secrets = Path(args.client_secrets)
    if not client_secrets.exists():
        print(f"Error: client secrets file not found: {client_secrets}")
        sys.exit(1)

    try:
        token = obtain_refresh_token(client_secrets, args.port)
    except RuntimeError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    print("Authorization complete. Add this to your environment or .env file:")
    print(f"GOOGLE_REFRESH_TOKEN={token}")


if __name__ == "__main__":
    main()
