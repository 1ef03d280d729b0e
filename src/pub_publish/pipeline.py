# SPDX-License-Identifier: MIT
"""Pre-publish and post-publish step sequences.

Each step is gated by a configuration flag. Before any side effect runs, the
step's mode is decided from the gate and the dry-run flag:

- SKIP: the gate is off, nothing happens and nothing is logged
- SIMULATE: dry-run, the step is logged as what it would do
- EXECUTE: the collaborator is called and a failure ends the hook

Failures never escape as exceptions; they come back as an unsuccessful
HookResult naming the step. Nothing already done is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .config import PluginConfig
from .credentials import (
    CredentialsError,
    PubCredentials,
    credentials_from_token,
    load_credentials,
)
from .dart import CommandCancelledError, CommandError, CommandRunner, DartCLI
from .pubspec import Pubspec, PubspecError, parse_pubspec, update_version
from .validator import is_flutter_package

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY = "pub.dev"


class StepMode(Enum):
    """How a pipeline step is carried out."""

    SKIP = "skip"
    SIMULATE = "simulate"
    EXECUTE = "execute"


class PipelineState(Enum):
    """Lifecycle of a single hook run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Step(str, Enum):
    """Named pipeline steps."""

    PARSE_PUBSPEC = "parse_pubspec"
    UPDATE_VERSION = "update_version"
    ANALYZE = "analyze"
    FORMAT_CHECK = "format_check"
    TEST = "test"
    DRY_RUN_VALIDATE = "dry_run_validate"
    PUBLISH = "publish"


def resolve_step_mode(enabled: bool, dry_run: bool) -> StepMode:
    """Decide how a step runs from its gate and the dry-run flag."""
    if not enabled:
        return StepMode.SKIP
    if dry_run:
        return StepMode.SIMULATE
    return StepMode.EXECUTE


@dataclass(frozen=True)
class HookResult:
    """Outcome of a hook run.

    Attributes:
        success: Whether every step succeeded
        message: Single-line summary or failure cause
        step: The step that failed, None on success
        simulated: Steps that were only logged because of dry-run
    """

    success: bool
    message: str
    step: Optional[Step] = None
    simulated: tuple[Step, ...] = ()


class StepFailedError(Exception):
    """Raised inside the pipeline when an executed step fails."""

    def __init__(self, step: Step, message: str):
        self.step = step
        super().__init__(message)


@dataclass
class _Run:
    """Per-invocation bookkeeping."""

    log: logging.LoggerAdapter
    simulated: list[Step] = field(default_factory=list)


class PublishPipeline:
    """Runs the pub plugin's hooks against a single package.

    Args:
        config: Plugin configuration for this run
        runner: Command runner; defaults to DartCLI in the pubspec's directory
    """

    def __init__(self, config: PluginConfig, runner: Optional[CommandRunner] = None) -> None:
        self.config = config
        self.pubspec_path = Path(config.pubspec_path)
        self.runner: CommandRunner = runner or DartCLI(self.pubspec_path.parent)
        self.state = PipelineState.NOT_STARTED

    def run_pre_publish(self, release_version: str) -> HookResult:
        """Update the version and run the checks pub.dev publishing needs.

        Args:
            release_version: Version being released

        Returns:
            HookResult describing the outcome
        """
        return self._run_hook("pre-publish", release_version, self._pre_publish)

    def run_post_publish(self, release_version: str) -> HookResult:
        """Publish the package to the registry.

        Args:
            release_version: Version being released, falls back to the
                pubspec version when empty

        Returns:
            HookResult describing the outcome
        """
        return self._run_hook("post-publish", release_version, self._post_publish)

    def _run_hook(
        self,
        hook: str,
        release_version: str,
        body: Callable[[_Run, Pubspec, str], str],
    ) -> HookResult:
        self.state = PipelineState.RUNNING
        run = _Run(
            log=logging.LoggerAdapter(
                logger, {"plugin": "pub", "hook": hook, "version": release_version}
            )
        )

        try:
            pubspec = self._parse_pubspec()
            message = body(run, pubspec, release_version)
        except StepFailedError as e:
            self.state = PipelineState.FAILED
            run.log.error("%s failed: %s", e.step.value, e)
            return HookResult(
                success=False, message=str(e), step=e.step, simulated=tuple(run.simulated)
            )

        self.state = PipelineState.SUCCEEDED
        run.log.info("%s completed successfully", hook)
        return HookResult(success=True, message=message, simulated=tuple(run.simulated))

    def _parse_pubspec(self) -> Pubspec:
        try:
            return parse_pubspec(self.pubspec_path)
        except PubspecError as e:
            raise StepFailedError(
                Step.PARSE_PUBSPEC, f"Failed to parse pubspec.yaml: {e}"
            ) from e

    def _step(
        self,
        run: _Run,
        step: Step,
        enabled: bool,
        description: str,
        action: Callable[[], None],
        failure: str,
    ) -> None:
        mode = resolve_step_mode(enabled, self.config.dry_run)
        if mode is StepMode.SKIP:
            return

        if mode is StepMode.SIMULATE:
            run.log.info("[DRY-RUN] Would %s", description)
            run.simulated.append(step)
            return

        run.log.info("Running %s", step.value)
        try:
            action()
        except CommandCancelledError as e:
            raise StepFailedError(step, f"{failure}: cancelled: {e}") from e
        except (CommandError, PubspecError) as e:
            raise StepFailedError(step, f"{failure}: {e}") from e

    def _pre_publish(self, run: _Run, pubspec: Pubspec, release_version: str) -> str:
        config = self.config
        flutter = is_flutter_package(pubspec)
        run.log.info("Preparing %s (flutter=%s)", pubspec.name, flutter)

        def bump_version() -> None:
            if not release_version:
                raise PubspecError("no release version provided")
            update_version(self.pubspec_path, release_version)

        self._step(
            run,
            Step.UPDATE_VERSION,
            config.update_version,
            f"update version from {pubspec.version} to {release_version}",
            bump_version,
            "Failed to update version",
        )
        self._step(
            run,
            Step.ANALYZE,
            config.analyze,
            "run dart analyze",
            self.runner.analyze,
            "Analysis failed",
        )
        self._step(
            run,
            Step.FORMAT_CHECK,
            config.format_check,
            "check code formatting",
            self.runner.format_check,
            "Format check failed",
        )

        if flutter:
            self._step(
                run,
                Step.TEST,
                config.test,
                "run flutter test",
                self.runner.flutter_test,
                "Flutter tests failed",
            )
        else:
            test_config = config.test_config
            self._step(
                run,
                Step.TEST,
                config.test,
                f"run dart test (platform={test_config.platform!r}, "
                f"concurrency={test_config.concurrency}, coverage={test_config.coverage})",
                lambda: self.runner.test(test_config),
                "Tests failed",
            )

        self._step(
            run,
            Step.DRY_RUN_VALIDATE,
            config.dry_run_validate,
            "run dart pub publish --dry-run",
            self.runner.publish_dry_run,
            "Dry-run validation failed",
        )

        if run.simulated:
            steps = ", ".join(step.value for step in run.simulated)
            version = release_version or pubspec.version
            return f"[DRY-RUN] Package validation simulated for {pubspec.name}@{version} (steps: {steps})"
        return "Package validated successfully"

    def _resolve_credentials(self, run: _Run) -> Optional[PubCredentials]:
        if self.config.access_token:
            return credentials_from_token(self.config.access_token)

        try:
            credentials = load_credentials(self.config.credentials_path)
        except CredentialsError as e:
            # The publish command reports missing authentication itself
            run.log.warning("No pub credentials loaded: %s", e)
            return None

        if not credentials.is_valid():
            run.log.warning("Loaded pub credentials are empty or expired")
        return credentials

    def _post_publish(self, run: _Run, pubspec: Pubspec, release_version: str) -> str:
        config = self.config
        version = release_version or pubspec.version
        registry = config.hosted_url or DEFAULT_REGISTRY
        credentials = self._resolve_credentials(run)

        self._step(
            run,
            Step.PUBLISH,
            True,
            f"publish {pubspec.name}@{version} to {registry} (force={config.force})",
            lambda: self.runner.publish(
                force=config.force,
                credentials=credentials,
                hosted_url=config.hosted_url,
            ),
            "Publish failed",
        )

        if config.dry_run:
            return f"[DRY-RUN] Would publish {pubspec.name}@{version} to {registry}"
        return f"Published {pubspec.name}@{version} to {registry}"
