# SPDX-License-Identifier: MIT
"""CLI entry point for the pub-publish command."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import click

from .config import ConfigError, load_config_file
from .dart import CommandError, DartCLI, is_dart_available
from .logging_config import setup_logging
from .plugin import ExecuteRequest, Hook, PubPlugin, ReleaseContext


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.verbose: bool = False
        self.plugin: PubPlugin = PubPlugin()


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


def _load_raw_config(config_file: Optional[Path]) -> dict[str, Any]:
    if config_file is None:
        return {}
    return load_config_file(config_file)


@click.group()
@click.version_option(package_name="pub-publish")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "-C",
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Change to directory before running command.",
)
@pass_context
def cli(ctx: Context, verbose: bool, directory: Optional[Path]) -> None:
    """Validate and publish Dart/Flutter packages to pub.dev.

    \b
    Examples:
        pub-publish validate --config release.yaml
        pub-publish pre-publish --version 2.0.0
        pub-publish post-publish --version 2.0.0 --dry-run
    """
    ctx.verbose = verbose
    setup_logging(level=logging.DEBUG if verbose else logging.INFO)
    if directory is not None:
        os.chdir(directory)


config_option = click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON file with plugin configuration.",
)


@cli.command()
@pass_context
def info(ctx: Context) -> None:
    """Show plugin metadata."""
    plugin_info = ctx.plugin.get_info()
    echo_info(f"{plugin_info.name} {plugin_info.version}")
    echo_info(plugin_info.description)
    echo_info("Hooks: " + ", ".join(hook.value for hook in plugin_info.hooks))

    if not is_dart_available():
        echo_warning("Dart SDK not found in PATH")
        return
    try:
        echo_info(DartCLI().get_version())
    except CommandError as e:
        echo_warning(f"Could not determine Dart SDK version: {e}")


@cli.command()
@config_option
@pass_context
def validate(ctx: Context, config_file: Optional[Path]) -> None:
    """Check configuration, the Dart SDK and pubspec.yaml."""
    response = ctx.plugin.validate(_load_raw_config(config_file))

    if response.valid:
        echo_success("Validation passed!")
        return

    echo_error(f"Errors ({len(response.errors)}):")
    for error in response.errors:
        echo_error(f"  - [{error.field}] {error.message}")
    raise SystemExit(1)


def _run_hook(
    ctx: Context,
    hook: Hook,
    version: str,
    config_file: Optional[Path],
    dry_run: bool,
) -> None:
    request = ExecuteRequest(
        hook=hook.value,
        config=_load_raw_config(config_file),
        context=ReleaseContext(version=version),
        dry_run=dry_run,
    )
    response = ctx.plugin.execute(request)

    if not response.success:
        echo_error(response.message)
        raise SystemExit(1)

    if dry_run or response.outputs.get("dry_run"):
        echo_warning(response.message)
    else:
        echo_success(response.message)


@cli.command("pre-publish")
@click.option("--version", "version", default="", help="Version being released.")
@config_option
@click.option("--dry-run", is_flag=True, help="Show what would be done without doing it.")
@pass_context
def pre_publish(ctx: Context, version: str, config_file: Optional[Path], dry_run: bool) -> None:
    """Update pubspec.yaml and run analyze, format, test and dry-run checks."""
    _run_hook(ctx, Hook.PRE_PUBLISH, version, config_file, dry_run)


@cli.command("post-publish")
@click.option("--version", "version", default="", help="Version being released.")
@config_option
@click.option("--dry-run", is_flag=True, help="Show what would be published without publishing.")
@pass_context
def post_publish(ctx: Context, version: str, config_file: Optional[Path], dry_run: bool) -> None:
    """Publish the package to pub.dev."""
    _run_hook(ctx, Hook.POST_PUBLISH, version, config_file, dry_run)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)
    except FileNotFoundError as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
