# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for pub-publish tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator, Optional

import pytest
from click.testing import CliRunner

from pub_publish.config import TestConfig
from pub_publish.credentials import PubCredentials
from pub_publish.dart import CommandError

# 90 characters
DESCRIPTION = "Helpers for parsing, validating and publishing Dart packages from a release pipeline tool."

PUBSPEC_CONTENT = f"""# Package metadata
name: p
# this is the package version
version: 1.0.0
description: {DESCRIPTION}

environment:
  sdk: '>=3.0.0'

dependencies:
  path: ^1.8.0

dev_dependencies:
  test: ^1.24.0
"""

FLUTTER_PUBSPEC_CONTENT = f"""name: my_flutter_app
version: 1.0.0+1
description: {DESCRIPTION}

environment:
  sdk: '>=3.0.0 <4.0.0'
  flutter: '>=3.10.0'

dependencies:
  flutter:
    sdk: flutter

flutter:
  uses-material-design: true
"""


class FakeRunner:
    """Command runner that records calls instead of running dart."""

    def __init__(self, fail: Optional[dict[str, CommandError]] = None) -> None:
        self.fail = fail or {}
        self.calls: list[str] = []
        self.test_configs: list[TestConfig] = []
        self.publish_kwargs: dict = {}

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    def analyze(self) -> None:
        self._call("analyze")

    def format_check(self) -> None:
        self._call("format_check")

    def test(self, test_config: TestConfig) -> None:
        self.test_configs.append(test_config)
        self._call("test")

    def flutter_test(self) -> None:
        self._call("flutter_test")

    def publish_dry_run(self) -> None:
        self._call("publish_dry_run")

    def publish(
        self,
        *,
        force: bool = False,
        credentials: Optional[PubCredentials] = None,
        hosted_url: str = "",
    ) -> None:
        self.publish_kwargs = {"force": force, "credentials": credentials, "hosted_url": hosted_url}
        self._call("publish")


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo handlers installed by setup_logging so caplog keeps working."""
    yield
    package_logger = logging.getLogger("pub_publish")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def pubspec_file(tmp_path: Path) -> Path:
    """Create a Dart package pubspec.yaml."""
    path = tmp_path / "pubspec.yaml"
    path.write_text(PUBSPEC_CONTENT)
    return path


@pytest.fixture
def flutter_pubspec_file(tmp_path: Path) -> Path:
    """Create a Flutter package pubspec.yaml."""
    path = tmp_path / "pubspec.yaml"
    path.write_text(FLUTTER_PUBSPEC_CONTENT)
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Create a command runner that records calls."""
    return FakeRunner()
