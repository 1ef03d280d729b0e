# SPDX-License-Identifier: MIT
"""Tests for pub credential loading."""

from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

from pub_publish.credentials import (
    CredentialsNotFoundError,
    CredentialsParseError,
    PubCredentials,
    credentials_from_token,
    default_credentials_path,
    is_expired,
    is_valid,
    load_credentials,
)


@pytest.fixture
def credentials_file(tmp_path: Path) -> Path:
    """Create a credentials.json as written by dart pub login."""
    path = tmp_path / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "accessToken": "test-access-token",
                "refreshToken": "test-refresh-token",
                "tokenEndpoint": "https://accounts.google.com/o/oauth2/token",
                "scopes": ["openid", "https://www.googleapis.com/auth/userinfo.email"],
                "expiration": 1893456000,
            }
        )
    )
    return path


class TestLoadCredentials:
    """Tests for load_credentials function."""

    def test_valid_credentials(self, credentials_file: Path):
        """All fields are read."""
        creds = load_credentials(credentials_file)
        assert creds == PubCredentials(
            access_token="test-access-token",
            refresh_token="test-refresh-token",
            token_endpoint="https://accounts.google.com/o/oauth2/token",
            expiration=1893456000,
        )

    def test_accepts_string_path(self, credentials_file: Path):
        """Paths may be given as strings."""
        assert load_credentials(str(credentials_file)).access_token == "test-access-token"

    def test_missing_optional_fields(self, tmp_path: Path):
        """Only an access token is required in practice."""
        path = tmp_path / "credentials.json"
        path.write_text('{"accessToken": "abc"}')
        creds = load_credentials(path)
        assert creds.access_token == "abc"
        assert creds.refresh_token == ""
        assert creds.expiration == 0

    def test_invalid_json(self, tmp_path: Path):
        """Malformed JSON raises CredentialsParseError."""
        path = tmp_path / "credentials.json"
        path.write_text("{invalid")
        with pytest.raises(CredentialsParseError):
            load_credentials(path)

    def test_wrong_field_type(self, tmp_path: Path):
        """A non-integer expiration is a parse error naming the field."""
        path = tmp_path / "credentials.json"
        path.write_text('{"accessToken": "abc", "expiration": "tomorrow"}')
        with pytest.raises(CredentialsParseError) as exc_info:
            load_credentials(path)
        assert "expiration" in str(exc_info.value)

    def test_not_an_object(self, tmp_path: Path):
        """A JSON array is not a credentials document."""
        path = tmp_path / "credentials.json"
        path.write_text("[]")
        with pytest.raises(CredentialsParseError):
            load_credentials(path)

    def test_file_not_found(self, tmp_path: Path):
        """A missing file raises CredentialsNotFoundError."""
        with pytest.raises(CredentialsNotFoundError):
            load_credentials(tmp_path / "nonexistent.json")

    def test_empty_path_uses_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """An empty path reads ~/.pub-cache/credentials.json."""
        monkeypatch.setenv("HOME", str(tmp_path))
        pub_cache = tmp_path / ".pub-cache"
        pub_cache.mkdir()
        (pub_cache / "credentials.json").write_text('{"accessToken": "from-home"}')

        assert load_credentials("").access_token == "from-home"


class TestDefaultCredentialsPath:
    """Tests for default_credentials_path function."""

    def test_under_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """The default path is inside the pub cache in the home directory."""
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_credentials_path() == tmp_path / ".pub-cache" / "credentials.json"


class TestCredentialsFromToken:
    """Tests for credentials_from_token function."""

    def test_token_only(self):
        """Only the access token is set and it never expires."""
        creds = credentials_from_token("my-token")
        assert creds.access_token == "my-token"
        assert creds.refresh_token == ""
        assert creds.token_endpoint == ""
        assert creds.expiration == 0
        assert creds.is_valid() is True


class TestIsExpired:
    """Tests for credential expiry."""

    def test_no_expiration(self):
        """Expiration 0 never expires."""
        creds = PubCredentials(access_token="t", expiration=0)
        assert is_expired(creds) is False
        assert creds.is_expired(now=10**12) is False

    def test_future_expiration(self):
        """An expiry in the future hasn't passed."""
        creds = PubCredentials(access_token="t", expiration=int(time.time()) + 3600)
        assert is_expired(creds) is False

    def test_past_expiration(self):
        """An expiry in the past has passed."""
        creds = PubCredentials(access_token="t", expiration=int(time.time()) - 3600)
        assert is_expired(creds) is True

    def test_explicit_now(self):
        """The comparison is strictly after the expiry second."""
        creds = PubCredentials(access_token="t", expiration=1000)
        assert creds.is_expired(now=1000) is False
        assert creds.is_expired(now=1001) is True


class TestIsValid:
    """Tests for credential validity."""

    def test_valid_credentials(self):
        """A token with a future expiry is valid."""
        creds = PubCredentials(access_token="t", expiration=int(time.time()) + 3600)
        assert is_valid(creds) is True

    def test_empty_token(self):
        """An empty token is invalid regardless of expiry."""
        assert is_valid(PubCredentials(access_token="", expiration=0)) is False
        assert is_valid(PubCredentials(access_token="", expiration=int(time.time()) + 3600)) is False

    def test_expired_credentials(self):
        """An expired token is invalid even though it is non-empty."""
        creds = PubCredentials(access_token="t", expiration=int(time.time()) - 3600)
        assert is_valid(creds) is False

    def test_no_expiration_set(self):
        """A token without expiry is valid."""
        assert is_valid(PubCredentials(access_token="t")) is True
