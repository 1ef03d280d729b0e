# SPDX-License-Identifier: MIT
"""Dart/Flutter package publishing to pub.dev for release automation.

This package provides:
- pubspec.yaml parsing and format-preserving version updates
- pub.dev listing rule validation
- pub credential loading
- The pre-publish and post-publish pipelines behind the release plugin

Example:
    >>> from pub_publish import parse_pubspec, update_version, validate_pubspec
    >>>
    >>> update_version("pubspec.yaml", "2.0.0")
    >>> result = validate_pubspec(parse_pubspec("pubspec.yaml"))
    >>> result.valid
    True
"""

__version__ = "0.1.0"

from .config import (
    ConfigError,
    PluginConfig,
    TestConfig,
    default_config,
    parse_config,
    validate_config,
)
from .credentials import (
    CredentialsError,
    CredentialsNotFoundError,
    CredentialsParseError,
    PubCredentials,
    credentials_from_token,
    default_credentials_path,
    is_expired,
    is_valid,
    load_credentials,
)
from .dart import (
    CommandCancelledError,
    CommandError,
    CommandRunner,
    DartCLI,
    DartCommandError,
)
from .pipeline import (
    HookResult,
    PipelineState,
    PublishPipeline,
    Step,
    StepMode,
    resolve_step_mode,
)
from .plugin import (
    ExecuteRequest,
    ExecuteResponse,
    Hook,
    PluginInfo,
    PubPlugin,
    ReleaseContext,
    ValidateResponse,
)
from .pubspec import (
    Pubspec,
    PubspecError,
    PubspecNotFoundError,
    PubspecParseError,
    PubspecWriteError,
    VersionFieldNotFoundError,
    parse_pubspec,
    update_version,
)
from .validator import (
    PubspecValidationError,
    ValidationErrorDetail,
    ValidationResult,
    is_flutter_package,
    validate_pubspec,
    validate_pubspec_strict,
)

__all__ = [
    # Pubspec
    "Pubspec",
    "parse_pubspec",
    "update_version",
    "PubspecError",
    "PubspecNotFoundError",
    "PubspecParseError",
    "PubspecWriteError",
    "VersionFieldNotFoundError",
    # Validation
    "validate_pubspec",
    "validate_pubspec_strict",
    "is_flutter_package",
    "ValidationResult",
    "ValidationErrorDetail",
    "PubspecValidationError",
    # Credentials
    "PubCredentials",
    "load_credentials",
    "credentials_from_token",
    "default_credentials_path",
    "is_expired",
    "is_valid",
    "CredentialsError",
    "CredentialsNotFoundError",
    "CredentialsParseError",
    # Configuration
    "PluginConfig",
    "TestConfig",
    "default_config",
    "parse_config",
    "validate_config",
    "ConfigError",
    # Commands
    "CommandRunner",
    "DartCLI",
    "CommandError",
    "DartCommandError",
    "CommandCancelledError",
    # Pipeline
    "PublishPipeline",
    "HookResult",
    "PipelineState",
    "Step",
    "StepMode",
    "resolve_step_mode",
    # Plugin
    "PubPlugin",
    "PluginInfo",
    "Hook",
    "ReleaseContext",
    "ExecuteRequest",
    "ExecuteResponse",
    "ValidateResponse",
]
