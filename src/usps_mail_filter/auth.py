"""Gmail OAuth session setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from .constants import CREDENTIALS_FILE, SCOPES, TOKEN_FILE, config_dir

logger = logging.getLogger(__name__)


def _run_consent_flow(credentials_path: Path) -> Credentials:
    if not credentials_path.exists():
        raise FileNotFoundError(
            f"Credentials file not found at {credentials_path}.\n"
            "Download your OAuth client credentials from the Google Cloud Console "
            "and save them as:\n"
            f"  {credentials_path}"
        )
    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
    return flow.run_local_server(port=0)


def _save_token(token_path: Path, creds: Credentials) -> None:
    logger.debug("Saving credential file to: %s", token_path)
    token_path.write_text(creds.to_json())
    os.chmod(token_path, 0o600)


def load_credentials(credentials_path: Path, token_path: Path) -> Credentials:
    """Return valid user credentials for the modify scope.

    A cached token is refreshed when expired. If there is no token, or the
    refresh token has been revoked, the browser consent flow runs and the new
    token is cached.
    """
    creds: Credentials | None = None
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as exc:
            logger.warning("Stored token could not be refreshed (%s); re-authorizing", exc)
            creds = None
    else:
        creds = None

    if creds is None:
        creds = _run_consent_flow(credentials_path)

    _save_token(token_path, creds)
    return creds


def get_gmail_service() -> Resource:
    """Return an authenticated Gmail API service object."""
    home = config_dir()
    home.mkdir(parents=True, exist_ok=True)
    creds = load_credentials(home / CREDENTIALS_FILE, home / TOKEN_FILE)
    return build("gmail", "v1", credentials=creds, cache_discovery=False)
