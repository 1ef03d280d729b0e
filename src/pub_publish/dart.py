# SPDX-License-Identifier: MIT
"""Wrappers around the ``dart`` and ``flutter`` command-line tools."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
import time
from pathlib import Path
from typing import Mapping, Optional, Protocol

from .config import TestConfig
from .credentials import PubCredentials

logger = logging.getLogger(__name__)

DART_EXECUTABLE = "dart"
FLUTTER_EXECUTABLE = "flutter"

# How often a running command checks for cancellation, in seconds
POLL_INTERVAL = 0.1


class CommandError(Exception):
    """Base exception for external command failures."""

    def __init__(self, message: str, command: Optional[list[str]] = None):
        self.command = command or []
        super().__init__(message)


class DartCommandError(CommandError):
    """Raised when a command exits non-zero or can't be started.

    Attributes:
        command: The argument list that was run
        returncode: Exit status, None if the process never started
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, command)


class CommandCancelledError(CommandError):
    """Raised when a running command is cancelled or exceeds its deadline."""

    pass


class CommandRunner(Protocol):
    """Commands the publish pipeline issues."""

    def analyze(self) -> None: ...

    def format_check(self) -> None: ...

    def test(self, test_config: TestConfig) -> None: ...

    def flutter_test(self) -> None: ...

    def publish_dry_run(self) -> None: ...

    def publish(
        self,
        *,
        force: bool = False,
        credentials: Optional[PubCredentials] = None,
        hosted_url: str = "",
    ) -> None: ...


def build_test_args(test_config: TestConfig) -> list[str]:
    """Build the ``dart test`` argument list for a test configuration."""
    args = [DART_EXECUTABLE, "test"]
    if test_config.platform:
        args.extend(["--platform", test_config.platform])
    if test_config.concurrency > 0:
        args.extend(["--concurrency", str(test_config.concurrency)])
    if test_config.coverage:
        args.append("--coverage")
    return args


def build_publish_args(force: bool) -> list[str]:
    """Build the ``dart pub publish`` argument list."""
    args = [DART_EXECUTABLE, "pub", "publish"]
    if force:
        args.append("--force")
    return args


def build_publish_env(credentials: Optional[PubCredentials], hosted_url: str) -> dict[str, str]:
    """Environment variables carrying credentials and the pub server URL."""
    env: dict[str, str] = {}
    if credentials is not None and credentials.access_token:
        env["PUB_TOKEN"] = credentials.access_token
    if hosted_url:
        env["PUB_HOSTED_URL"] = hosted_url
    return env


def is_dart_available() -> bool:
    """Return True if the dart executable is on PATH."""
    return shutil.which(DART_EXECUTABLE) is not None


class DartCLI:
    """Runs dart and flutter commands in a package directory.

    Commands block until the process exits. A command is killed and
    CommandCancelledError raised when ``cancel_event`` is set or ``timeout``
    seconds pass.

    Args:
        work_dir: Directory containing pubspec.yaml
        timeout: Per-command deadline in seconds, None for no deadline
        cancel_event: Event that cancels the running command when set
    """

    def __init__(
        self,
        work_dir: str | Path = ".",
        *,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.work_dir = Path(work_dir)
        self.timeout = timeout
        self.cancel_event = cancel_event

    def analyze(self) -> None:
        """Run ``dart analyze`` treating infos and warnings as errors."""
        self.run([DART_EXECUTABLE, "analyze", "--fatal-infos", "--fatal-warnings"])

    def format_check(self) -> None:
        """Fail if ``dart format`` would change any file."""
        self.run([DART_EXECUTABLE, "format", "--set-exit-if-changed", "."])

    def test(self, test_config: TestConfig) -> None:
        """Run ``dart test``."""
        self.run(build_test_args(test_config))

    def flutter_test(self) -> None:
        """Run ``flutter test``."""
        self.run([FLUTTER_EXECUTABLE, "test"])

    def publish_dry_run(self) -> None:
        """Run pub's own pre-publish checks without uploading."""
        self.run([DART_EXECUTABLE, "pub", "publish", "--dry-run"])

    def publish(
        self,
        *,
        force: bool = False,
        credentials: Optional[PubCredentials] = None,
        hosted_url: str = "",
    ) -> None:
        """Run ``dart pub publish``."""
        self.run(build_publish_args(force), extra_env=build_publish_env(credentials, hosted_url))

    def get_version(self) -> str:
        """Return the output of ``dart --version``."""
        return self.run([DART_EXECUTABLE, "--version"]).strip()

    def run(self, args: list[str], extra_env: Optional[Mapping[str, str]] = None) -> str:
        """Run a command to completion and return its standard output.

        Raises:
            DartCommandError: If the command can't be started or exits non-zero
            CommandCancelledError: If the command is cancelled or times out
        """
        command = " ".join(args)
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CommandCancelledError(f"{command} cancelled", args)

        env = None
        if extra_env:
            env = {**os.environ, **extra_env}

        logger.debug("Running %s", command, extra={"cwd": str(self.work_dir)})

        try:
            process = subprocess.Popen(
                args,
                cwd=self.work_dir,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise DartCommandError(f"failed to run {args[0]}: {e}", args) from e

        deadline = time.monotonic() + self.timeout if self.timeout is not None else None

        while True:
            try:
                stdout, stderr = process.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if self.cancel_event is not None and self.cancel_event.is_set():
                    reason = "cancelled"
                elif deadline is not None and time.monotonic() >= deadline:
                    reason = f"timed out after {self.timeout}s"
                else:
                    continue
                process.kill()
                process.communicate()
                logger.warning("Command %s: %s", reason, command)
                raise CommandCancelledError(f"{command} {reason}", args) from None

        if process.returncode != 0:
            stderr = stderr.strip()
            status = f"exit status {process.returncode}"
            message = f"{stderr}: {status}" if stderr else status
            raise DartCommandError(message, args, process.returncode, stderr)

        return stdout
