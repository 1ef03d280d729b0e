# SPDX-License-Identifier: MIT
"""Reading and editing pubspec.yaml manifests.

Parsing goes through PyYAML. Editing never does: ``update_version`` works on
the raw text with a line-anchored pattern so comments, blank lines, key order
and line endings written by humans survive the version bump untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

DEFAULT_PUBSPEC_PATH = "pubspec.yaml"

# Top-level ``version:`` key at column zero. The value stops before any line
# terminator so a CRLF file keeps its ``\r``.
VERSION_LINE_PATTERN = re.compile(r"^version:[ \t]*[^\r\n]+", re.MULTILINE)

# Implicit types that TextScalarLoader leaves as strings
_TEXT_TAGS = frozenset(
    {
        "tag:yaml.org,2002:bool",
        "tag:yaml.org,2002:int",
        "tag:yaml.org,2002:float",
        "tag:yaml.org,2002:timestamp",
    }
)


class PubspecError(Exception):
    """Base exception for pubspec-related errors."""

    pass


class PubspecNotFoundError(PubspecError):
    """Raised when pubspec.yaml is missing or cannot be read."""

    pass


class PubspecParseError(PubspecError):
    """Raised when pubspec.yaml is not well-formed YAML."""

    pass


class VersionFieldNotFoundError(PubspecError):
    """Raised when pubspec.yaml has no top-level version field."""

    pass


class PubspecWriteError(PubspecError):
    """Raised when the updated pubspec.yaml cannot be written."""

    pass


@dataclass
class Pubspec:
    """Fields of pubspec.yaml used for validation and publishing.

    Attributes:
        name: Package name
        version: Package version
        description: Package description shown on pub.dev
        homepage: Homepage URL
        repository: Repository URL
        environment: SDK constraints, None if the section is absent
        dependencies: Runtime dependencies
        dev_dependencies: Development dependencies
        flutter: The ``flutter:`` section of a Flutter package
    """

    name: str = ""
    version: str = ""
    description: str = ""
    homepage: str = ""
    repository: str = ""
    environment: Optional[dict[str, str]] = None
    dependencies: dict[str, Any] = field(default_factory=dict)
    dev_dependencies: dict[str, Any] = field(default_factory=dict)
    flutter: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        text: Optional[dict[str, Any]] = None,
    ) -> "Pubspec":
        """Create a Pubspec from a parsed YAML document.

        Args:
            data: Document loaded with the usual YAML types
            text: The same document loaded with ``TextScalarLoader``; when
                given, scalar fields and environment constraints come from it

        Raises:
            PubspecParseError: If a field or section has the wrong shape
        """
        scalars = text if text is not None else data
        environment = _mapping(scalars, "environment")
        return cls(
            name=_scalar(scalars, "name"),
            version=_scalar(scalars, "version"),
            description=_scalar(scalars, "description"),
            homepage=_scalar(scalars, "homepage"),
            repository=_scalar(scalars, "repository"),
            environment=(
                {str(k): _scalar(environment, k) for k in environment}
                if environment is not None
                else None
            ),
            dependencies=_mapping(data, "dependencies") or {},
            dev_dependencies=_mapping(data, "dev_dependencies") or {},
            flutter=_mapping(data, "flutter") or {},
        )


class TextScalarLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers, booleans and dates as written.

    ``version: 1.10`` loads as ``"1.10"`` rather than the float ``1.1``.
    """


TextScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TEXT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _scalar(data: dict[Any, Any], key: Any) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise PubspecParseError(
            f"'{key}' must be a scalar, got {type(value).__name__}"
        )
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _mapping(data: dict[str, Any], key: str) -> Optional[dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise PubspecParseError(
            f"'{key}' must be a mapping, got {type(value).__name__}"
        )
    return value


def parse_pubspec(path: str | Path) -> Pubspec:
    """Parse a pubspec.yaml file.

    Args:
        path: Path to pubspec.yaml

    Returns:
        Pubspec instance

    Raises:
        PubspecNotFoundError: If the file doesn't exist or can't be read
        PubspecParseError: If the file isn't valid YAML or isn't a mapping
    """
    pubspec_path = Path(path)

    try:
        content = pubspec_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PubspecNotFoundError(f"failed to read {pubspec_path}: {e}") from e

    try:
        data = yaml.safe_load(content)
        text = yaml.load(content, Loader=TextScalarLoader)
    except yaml.YAMLError as e:
        raise PubspecParseError(f"failed to parse {pubspec_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PubspecParseError(
            f"failed to parse {pubspec_path}: expected a mapping, got {type(data).__name__}"
        )

    return Pubspec.from_dict(data, text)


def replace_version(content: str, version: str) -> str:
    """Return ``content`` with every top-level version line set to ``version``.

    Raises:
        VersionFieldNotFoundError: If no top-level version line exists
    """
    if not VERSION_LINE_PATTERN.search(content):
        raise VersionFieldNotFoundError("version field not found in pubspec.yaml")

    replacement = f"version: {version}"
    return VERSION_LINE_PATTERN.sub(lambda _: replacement, content)


def update_version(path: str | Path, version: str) -> None:
    """Set the version in pubspec.yaml, preserving all other content.

    The file is rewritten in a single overwrite; it is left untouched when no
    version field is found.

    Args:
        path: Path to pubspec.yaml
        version: New version string

    Raises:
        PubspecNotFoundError: If the file can't be read
        VersionFieldNotFoundError: If there is no top-level version field
        PubspecWriteError: If the file can't be written
    """
    pubspec_path = Path(path)

    try:
        with open(pubspec_path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PubspecNotFoundError(f"failed to read {pubspec_path}: {e}") from e

    updated = replace_version(content, version)

    try:
        with open(pubspec_path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as e:
        raise PubspecWriteError(f"failed to write {pubspec_path}: {e}") from e
