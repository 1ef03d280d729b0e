# SPDX-License-Identifier: MIT
"""Plugin configuration loading.

The host hands the plugin a nested mapping. ``parse_config`` is lenient: any
key that is missing or has the wrong type takes its value from
``default_config()``. ``validate_config`` reports those type problems so the
host's validate step can surface them.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .pubspec import DEFAULT_PUBSPEC_PATH
from .schema import CONFIG_SCHEMA, schema_errors
from .validator import ValidationErrorDetail

ACCESS_TOKEN_ENV = "PUB_ACCESS_TOKEN"
HOSTED_URL_ENV = "PUB_HOSTED_URL"


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass(frozen=True)
class TestConfig:
    """Options passed to ``dart test``.

    Attributes:
        platform: Test platform (e.g. "vm", "chrome"), omitted when empty
        concurrency: Number of concurrent test suites, omitted when 0
        coverage: Collect coverage
    """

    __test__ = False

    platform: str = "vm"
    concurrency: int = 4
    coverage: bool = False


@dataclass(frozen=True)
class PluginConfig:
    """Pub plugin configuration.

    Attributes:
        pubspec_path: Path to pubspec.yaml
        update_version: Write the release version into pubspec.yaml
        credentials_path: Path to credentials.json, empty for the default
        access_token: pub.dev access token, overrides credentials_path
        hosted_url: Custom pub server URL
        validate: Check pub.dev listing rules during validation
        analyze: Run ``dart analyze``
        format_check: Run ``dart format --set-exit-if-changed``
        test: Run the test suite
        test_config: Options for ``dart test``
        dry_run_validate: Run ``dart pub publish --dry-run``
        force: Publish without interactive confirmation
        exclude: Paths excluded from publishing
        dry_run: Log steps instead of performing them
    """

    pubspec_path: str = DEFAULT_PUBSPEC_PATH
    update_version: bool = True
    credentials_path: str = ""
    access_token: str = ""
    hosted_url: str = ""
    validate: bool = True
    analyze: bool = True
    format_check: bool = True
    test: bool = True
    test_config: TestConfig = field(default_factory=TestConfig)
    dry_run_validate: bool = True
    force: bool = True
    exclude: tuple[str, ...] = ()
    dry_run: bool = False

    def with_dry_run(self, dry_run: bool) -> "PluginConfig":
        """Return a copy with ``dry_run`` OR-ed with the given flag."""
        return replace(self, dry_run=self.dry_run or dry_run)


def default_config() -> PluginConfig:
    """Return the configuration used when nothing is set."""
    return PluginConfig()


def _get_string(
    raw: Mapping[str, Any],
    key: str,
    default: str,
    env: Mapping[str, str],
    env_var: str = "",
) -> str:
    value = raw.get(key)
    if isinstance(value, str) and value:
        return value
    if env_var and env.get(env_var):
        return env[env_var]
    return default


def _get_bool(raw: Mapping[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key)
    if isinstance(value, bool):
        return value
    return default


def _parse_test_config(raw: Any, default: TestConfig) -> TestConfig:
    if not isinstance(raw, Mapping):
        return default

    platform = raw.get("platform")
    concurrency = raw.get("concurrency")
    coverage = raw.get("coverage")

    # JSON hosts send numbers as floats
    if isinstance(concurrency, bool) or not isinstance(concurrency, (int, float)):
        concurrency = default.concurrency

    return TestConfig(
        platform=platform if isinstance(platform, str) else default.platform,
        concurrency=int(concurrency),
        coverage=coverage if isinstance(coverage, bool) else default.coverage,
    )


def _parse_exclude(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(item for item in raw if isinstance(item, str))


def parse_config(
    raw: Optional[Mapping[str, Any]],
    env: Optional[Mapping[str, str]] = None,
) -> PluginConfig:
    """Build a PluginConfig from the host's configuration mapping.

    Args:
        raw: Configuration mapping (may be None or empty)
        env: Environment for ``access_token`` / ``hosted_url`` fallbacks,
            defaults to ``os.environ``

    Returns:
        PluginConfig instance
    """
    raw = raw or {}
    env = os.environ if env is None else env
    defaults = default_config()

    return PluginConfig(
        pubspec_path=_get_string(raw, "pubspec_path", defaults.pubspec_path, env),
        update_version=_get_bool(raw, "update_version", defaults.update_version),
        credentials_path=_get_string(raw, "credentials_path", defaults.credentials_path, env),
        access_token=_get_string(raw, "access_token", defaults.access_token, env, ACCESS_TOKEN_ENV),
        hosted_url=_get_string(raw, "hosted_url", defaults.hosted_url, env, HOSTED_URL_ENV),
        validate=_get_bool(raw, "validate", defaults.validate),
        analyze=_get_bool(raw, "analyze", defaults.analyze),
        format_check=_get_bool(raw, "format_check", defaults.format_check),
        test=_get_bool(raw, "test", defaults.test),
        test_config=_parse_test_config(raw.get("test_config"), defaults.test_config),
        dry_run_validate=_get_bool(raw, "dry_run_validate", defaults.dry_run_validate),
        force=_get_bool(raw, "force", defaults.force),
        exclude=_parse_exclude(raw.get("exclude")),
        dry_run=_get_bool(raw, "dry_run", defaults.dry_run),
    )


def validate_config(raw: Optional[Mapping[str, Any]]) -> list[ValidationErrorDetail]:
    """Check a configuration mapping against the plugin schema.

    Returns:
        List of errors, empty if the configuration is valid
    """
    return schema_errors(dict(raw or {}), CONFIG_SCHEMA)


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a configuration mapping from a YAML or JSON file.

    Raises:
        ConfigError: If the file is invalid or isn't a mapping
        FileNotFoundError: If the file doesn't exist
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")
    return data
