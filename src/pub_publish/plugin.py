# SPDX-License-Identifier: MIT
"""Release-tool plugin interface for publishing to pub.dev."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from . import __version__
from .config import parse_config, validate_config
from .dart import CommandRunner, is_dart_available
from .pipeline import PublishPipeline
from .pubspec import PubspecError, parse_pubspec
from .validator import ValidationErrorDetail, validate_pubspec

logger = logging.getLogger(__name__)


class Hook(str, Enum):
    """Release lifecycle points a plugin can run at."""

    PRE_PUBLISH = "pre-publish"
    POST_PUBLISH = "post-publish"


@dataclass(frozen=True)
class PluginInfo:
    """Plugin metadata reported to the release tool."""

    name: str
    version: str
    description: str
    hooks: list[Hook] = field(default_factory=list)


@dataclass
class ReleaseContext:
    """Release details supplied by the release tool.

    Attributes:
        version: Version being released
        previous_version: Last released version
        tag_name: Git tag for the release
        changelog: Release notes
    """

    version: str = ""
    previous_version: str = ""
    tag_name: str = ""
    changelog: str = ""


@dataclass
class ExecuteRequest:
    """A request to run the plugin at a hook."""

    hook: str
    config: dict[str, Any] = field(default_factory=dict)
    context: ReleaseContext = field(default_factory=ReleaseContext)
    dry_run: bool = False


@dataclass(frozen=True)
class ExecuteResponse:
    """Result of running a hook."""

    success: bool
    message: str
    outputs: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidateResponse:
    """Result of validating the plugin configuration and environment.

    Attributes:
        valid: Whether no errors were found
        errors: Every problem found, across configuration, tooling and pubspec
    """

    valid: bool
    errors: list[ValidationErrorDetail] = field(default_factory=list)


class PubPlugin:
    """Publishes Dart and Flutter packages to pub.dev.

    Args:
        runner_factory: Builds the command runner for a pipeline run, given
            the pipeline; None uses the pipeline's DartCLI default
    """

    name = "pub"

    def __init__(
        self,
        runner_factory: Optional[Callable[[PublishPipeline], CommandRunner]] = None,
    ) -> None:
        self.runner_factory = runner_factory

    def get_info(self) -> PluginInfo:
        """Return plugin metadata."""
        return PluginInfo(
            name=self.name,
            version=__version__,
            description="Dart/Flutter package publishing to pub.dev",
            hooks=[Hook.PRE_PUBLISH, Hook.POST_PUBLISH],
        )

    def validate(self, raw_config: Optional[dict[str, Any]]) -> ValidateResponse:
        """Check configuration, the dart tool and pubspec.yaml.

        All problems are collected rather than stopping at the first one;
        pubspec listing rules report only their first violation.
        """
        errors: list[ValidationErrorDetail] = list(validate_config(raw_config))
        config = parse_config(raw_config)

        if not is_dart_available():
            errors.append(ValidationErrorDetail("dart", "Dart SDK not found in PATH"))

        try:
            pubspec = parse_pubspec(config.pubspec_path)
        except PubspecError as e:
            errors.append(
                ValidationErrorDetail(
                    "pubspec_path", f"Invalid pubspec.yaml: {e}", config.pubspec_path
                )
            )
        else:
            if config.validate:
                result = validate_pubspec(pubspec)
                for error in result.errors:
                    errors.append(ValidationErrorDetail("pubspec", error.message, error.value))

        return ValidateResponse(valid=not errors, errors=errors)

    def execute(self, request: ExecuteRequest) -> ExecuteResponse:
        """Run the plugin at a hook.

        Hook failures are reported in the response, never raised.
        """
        config = parse_config(request.config).with_dry_run(request.dry_run)
        pipeline = PublishPipeline(config)
        if self.runner_factory is not None:
            pipeline.runner = self.runner_factory(pipeline)

        version = request.context.version
        if request.hook == Hook.PRE_PUBLISH.value:
            result = pipeline.run_pre_publish(version)
        elif request.hook == Hook.POST_PUBLISH.value:
            result = pipeline.run_post_publish(version)
        else:
            logger.debug("Ignoring hook %s", request.hook)
            return ExecuteResponse(
                success=True,
                message=f"Hook {request.hook} not handled by pub plugin",
            )

        outputs: dict[str, Any] = {"dry_run": config.dry_run}
        if result.step is not None:
            outputs["failed_step"] = result.step.value
        if result.simulated:
            outputs["simulated_steps"] = [step.value for step in result.simulated]

        return ExecuteResponse(success=result.success, message=result.message, outputs=outputs)
