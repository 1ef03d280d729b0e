# SPDX-License-Identifier: MIT
"""Pub.dev OAuth credentials.

Credentials come either from an explicit access token or from the
``credentials.json`` file that ``dart pub login`` writes under ``~/.pub-cache``.
They are only ever read here; refreshing tokens is left to the dart tool.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .schema import CREDENTIALS_SCHEMA, schema_errors


class CredentialsError(Exception):
    """Base exception for credential loading errors."""

    pass


class CredentialsNotFoundError(CredentialsError):
    """Raised when the credentials file is missing or unreadable."""

    pass


class CredentialsParseError(CredentialsError):
    """Raised when the credentials file is not valid credentials JSON."""

    pass


@dataclass(frozen=True)
class PubCredentials:
    """Pub.dev OAuth credentials.

    Attributes:
        access_token: Bearer token sent to the registry
        refresh_token: Token used by dart to obtain a new access token
        token_endpoint: OAuth token endpoint
        expiration: Expiry as epoch seconds, 0 if the token never expires
    """

    access_token: str = ""
    refresh_token: str = ""
    token_endpoint: str = ""
    expiration: int = 0

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Return True if the token has an expiry that lies in the past."""
        if self.expiration == 0:
            return False
        current = time.time() if now is None else now
        return int(current) > self.expiration

    def is_valid(self, now: Optional[float] = None) -> bool:
        """Return True if there is an access token and it hasn't expired."""
        if not self.access_token:
            return False
        return not self.is_expired(now)


def default_credentials_path() -> Path:
    """Return the location ``dart pub login`` stores credentials at."""
    return Path.home() / ".pub-cache" / "credentials.json"


def load_credentials(path: str | Path = "") -> PubCredentials:
    """Load pub credentials from a JSON file.

    Args:
        path: Path to credentials.json, or empty for the default location

    Returns:
        PubCredentials instance

    Raises:
        CredentialsNotFoundError: If the file can't be read
        CredentialsParseError: If the file isn't a valid credentials document
    """
    credentials_path = Path(path) if path else default_credentials_path()

    try:
        content = credentials_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialsNotFoundError(f"failed to read credentials: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CredentialsParseError(f"failed to parse credentials: {e}") from e

    errors = schema_errors(data, CREDENTIALS_SCHEMA)
    if errors:
        error = errors[0]
        raise CredentialsParseError(f"failed to parse credentials: [{error.field}] {error.message}")

    return PubCredentials(
        access_token=data.get("accessToken") or "",
        refresh_token=data.get("refreshToken") or "",
        token_endpoint=data.get("tokenEndpoint") or "",
        expiration=data.get("expiration") or 0,
    )


def credentials_from_token(token: str) -> PubCredentials:
    """Create in-memory credentials holding only an access token."""
    return PubCredentials(access_token=token)


def is_expired(credentials: PubCredentials, now: Optional[float] = None) -> bool:
    """Return True if ``credentials`` carry an expiry in the past."""
    return credentials.is_expired(now)


def is_valid(credentials: PubCredentials, now: Optional[float] = None) -> bool:
    """Return True if ``credentials`` have a token that hasn't expired."""
    return credentials.is_valid(now)
