# SPDX-License-Identifier: MIT
"""Logging setup for the pub-publish CLI.

Log lines carry the record's extra fields (plugin, hook, version) after the
message. Fields and text that could hold pub credentials are redacted.

Usage:
    from pub_publish.logging_config import setup_logging

    setup_logging(level=logging.DEBUG)
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, TextIO

REDACTED = "[REDACTED]"

# Extra fields whose values are never printed
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "token",
        "access_token",
        "refresh_token",
        "credentials",
        "password",
        "secret",
        "authorization",
    }
)

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(PUB_TOKEN=)\S+"),
    re.compile(r"(\bbearer\s+)[\w\-\.]+", re.I),
    re.compile(r"(\"?(?:accessToken|refreshToken)\"?\s*[:=]\s*\"?)[^\s\",}]+"),
]

# Attributes every LogRecord has; anything else came from ``extra``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def sanitize_text(text: str) -> str:
    """Replace credential values embedded in free text."""
    if not text:
        return text
    for pattern in _SENSITIVE_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
    return text


def filter_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop blocked fields and sanitize string values."""
    filtered: dict[str, Any] = {}
    for key, value in fields.items():
        key_lower = key.lower()
        if any(blocked in key_lower for blocked in BLOCKED_FIELDS):
            continue
        if isinstance(value, str):
            filtered[key] = sanitize_text(value)
        else:
            filtered[key] = value
    return filtered


class PluginFormatter(logging.Formatter):
    """Human-readable formatter that appends filtered extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {sanitize_text(record.getMessage())}"

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }
        if extra:
            filtered = filter_fields(extra)
            if filtered:
                base += " | " + " ".join(f"{k}={v}" for k, v in filtered.items())

        if record.exc_info:
            base += "\n" + sanitize_text(self.formatException(record.exc_info))

        return base


def setup_logging(*, level: int | str = logging.INFO, stream: TextIO | None = None) -> None:
    """Send pub_publish log records to ``stream`` (stderr by default).

    Safe to call more than once; earlier handlers installed here are replaced.
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(PluginFormatter())

    package_logger = logging.getLogger("pub_publish")
    package_logger.setLevel(level)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.propagate = False
