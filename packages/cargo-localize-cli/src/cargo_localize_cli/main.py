# SPDX-License-Identifier: MIT
"""CLI entry point for the cargo-localize command.

Cargo runs external subcommands as ``cargo-<name> <name> [args...]``, so
``cargo localize`` reaches the ``localize`` command of this group.
"""

from __future__ import annotations

import logging
import sys

import click

from cargo_localize import LocalizeError

from . import __version__

ENGINE_LOGGER = "cargo_localize"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.verbose: bool = False


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


class ClickEchoHandler(logging.Handler):
    """Logging handler printing engine progress through click."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        if record.levelno >= logging.WARNING:
            echo_warning(message)
        else:
            echo_info(message)


def configure_logging(verbose: bool) -> None:
    """Route engine log records to the terminal."""
    logger = logging.getLogger(ENGINE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, ClickEchoHandler):
            logger.removeHandler(handler)
    logger.addHandler(ClickEchoHandler())
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


@click.group()
@click.version_option(version=__version__, prog_name="cargo-localize")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """Localize Cargo dependencies into the project.

    Copies every registry dependency into a vendor directory and rewrites
    Cargo.toml files to use them by path.

    \b
    Examples:
        cargo localize
        cargo localize path/to/project
        cargo localize --third-party-dir vendor
    """
    ctx.verbose = verbose
    configure_logging(verbose)


# Import and register commands
from .commands import localize

cli.add_command(localize.localize)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except LocalizeError as e:
        echo_error(f"[{e.stage}] {e}")
        sys.exit(1)
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
