# SPDX-License-Identifier: MIT
"""JSON Schema definitions for plugin configuration and pub credentials."""

from __future__ import annotations

from typing import Any, Iterable

from jsonschema import Draft202012Validator, ValidationError

from .validator import ValidationErrorDetail

# JSON Schema for the plugin configuration block
CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Pub Plugin Configuration",
    "type": "object",
    "properties": {
        "pubspec_path": {
            "type": "string",
            "description": "Path to pubspec.yaml",
        },
        "update_version": {
            "type": "boolean",
            "description": "Write the release version into pubspec.yaml",
        },
        "credentials_path": {
            "type": "string",
            "description": "Path to pub credentials.json",
        },
        "access_token": {
            "type": "string",
            "description": "pub.dev access token",
        },
        "hosted_url": {
            "type": "string",
            "description": "Custom pub server URL",
        },
        "validate": {"type": "boolean"},
        "analyze": {"type": "boolean"},
        "format_check": {"type": "boolean"},
        "test": {"type": "boolean"},
        "test_config": {
            "type": "object",
            "properties": {
                "platform": {"type": "string"},
                "concurrency": {"type": "integer", "minimum": 0},
                "coverage": {"type": "boolean"},
            },
        },
        "dry_run_validate": {"type": "boolean"},
        "force": {"type": "boolean"},
        "exclude": {
            "type": "array",
            "items": {"type": "string"},
        },
        "dry_run": {"type": "boolean"},
    },
}

# JSON Schema for ~/.pub-cache/credentials.json
CREDENTIALS_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Pub Credentials",
    "type": "object",
    "properties": {
        "accessToken": {"type": "string"},
        "refreshToken": {"type": ["string", "null"]},
        "tokenEndpoint": {"type": ["string", "null"]},
        "scopes": {"type": "array", "items": {"type": "string"}},
        "expiration": {"type": "integer", "minimum": 0},
    },
}


def field_path(path: Iterable[str | int]) -> str:
    """Render a document path as a config key, e.g. ``test_config.concurrency``.

    List positions are written as ``exclude[1]``; the empty path is ``<root>``.
    """
    rendered = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)
    return rendered.lstrip(".") or "<root>"


def _format_error_message(error: ValidationError) -> str:
    """Format a jsonschema error into a human-readable message."""
    if error.validator == "type":
        expected = error.validator_value
        if isinstance(expected, list):
            expected = " or ".join(expected)
        actual = type(error.instance).__name__
        return f"Expected {expected}, got {actual}"

    if error.validator == "minimum":
        return f"Value must be at least {error.validator_value}"

    return error.message


def schema_errors(instance: Any, schema: dict) -> list[ValidationErrorDetail]:
    """Validate ``instance`` against ``schema`` and collect every violation.

    Args:
        instance: Decoded JSON/YAML document
        schema: JSON Schema to validate against

    Returns:
        List of errors, empty if the document is valid
    """
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    return [
        ValidationErrorDetail(
            field=field_path(error.absolute_path),
            message=_format_error_message(error),
            value=error.instance if error.absolute_path else None,
        )
        for error in errors
    ]
