# SPDX-License-Identifier: MIT
"""Pub.dev listing rules for pubspec.yaml.

Rules are checked in a fixed order and validation stops at the first failure,
so a result carries at most one error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .pubspec import Pubspec

MIN_DESCRIPTION_LENGTH = 60
MAX_DESCRIPTION_LENGTH = 180

FLUTTER_DEPENDENCY = "flutter"


class PubspecValidationError(Exception):
    """Raised when a pubspec fails pub.dev validation.

    Attributes:
        errors: List of validation errors with field names and messages
    """

    def __init__(self, errors: list[ValidationErrorDetail]):
        self.errors = errors
        message = "Pubspec validation failed"
        if errors:
            message += f": {errors[0].message}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Details about a single validation error.

    Attributes:
        field: Name of the invalid field (e.g., "description" or "environment.sdk")
        message: Human-readable error message
        value: The invalid value that caused the error (if available)
    """

    field: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Result of pubspec validation.

    Attributes:
        valid: Whether the pubspec is valid
        errors: List of validation errors (empty if valid)
    """

    valid: bool
    errors: list[ValidationErrorDetail] = field(default_factory=list)


def _first_error(pubspec: Pubspec) -> ValidationErrorDetail | None:
    if not pubspec.name:
        return ValidationErrorDetail("name", "package name is required")

    if not pubspec.version:
        return ValidationErrorDetail("version", "version is required")

    description = pubspec.description
    if not description:
        return ValidationErrorDetail("description", "description is required for pub.dev")

    if len(description) < MIN_DESCRIPTION_LENGTH:
        return ValidationErrorDetail(
            "description",
            f"description is too short: should be at least {MIN_DESCRIPTION_LENGTH} "
            f"characters (currently {len(description)})",
            description,
        )

    if len(description) > MAX_DESCRIPTION_LENGTH:
        return ValidationErrorDetail(
            "description",
            f"description is too long: should be at most {MAX_DESCRIPTION_LENGTH} "
            f"characters (currently {len(description)})",
            description,
        )

    if pubspec.environment is None:
        return ValidationErrorDetail("environment", "environment section is required")

    if not pubspec.environment.get("sdk"):
        return ValidationErrorDetail(
            "environment.sdk",
            "SDK constraint is required in environment section",
            pubspec.environment,
        )

    return None


def validate_pubspec(pubspec: Pubspec) -> ValidationResult:
    """Validate a pubspec against pub.dev requirements.

    Checks, in order: name, version, description presence and length
    (60 to 180 characters inclusive), environment section and SDK constraint.

    Args:
        pubspec: Parsed pubspec

    Returns:
        ValidationResult with at most one error

    Example:
        >>> result = validate_pubspec(Pubspec(version="1.0.0"))
        >>> result.errors[0].message
        'package name is required'
    """
    error = _first_error(pubspec)
    if error is not None:
        return ValidationResult(valid=False, errors=[error])
    return ValidationResult(valid=True)


def validate_pubspec_strict(pubspec: Pubspec) -> None:
    """Validate a pubspec and raise if it breaks a pub.dev rule.

    Raises:
        PubspecValidationError: If the pubspec is invalid
    """
    result = validate_pubspec(pubspec)
    if not result.valid:
        raise PubspecValidationError(result.errors)


def is_flutter_package(pubspec: Pubspec) -> bool:
    """Return True if the package depends on or configures Flutter."""
    if FLUTTER_DEPENDENCY in pubspec.dependencies:
        return True
    return len(pubspec.flutter) > 0
