"""CLI output helpers and exit codes.

Errors and progress go to stderr; rendered manifests are the only thing
written to stdout, so ``rbac-manager resolve ... > manifests.yaml`` works.

Example:
    from rbac_manager.cli.utils import error_exit, ExitCode

    error_exit("Definition is invalid", exit_code=ExitCode.VALIDATION_ERROR)
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes of rbac-manager commands."""

    SUCCESS = 0
    """Command completed successfully."""

    GENERAL_ERROR = 1
    """Unexpected failure."""

    USAGE_ERROR = 2
    """Invalid arguments or options."""

    FILE_NOT_FOUND = 3
    """Input file not found."""

    VALIDATION_ERROR = 5
    """The definition or the produced manifests are invalid."""

    NETWORK_ERROR = 8
    """The namespace directory could not be queried."""


def _with_context(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if context_str:
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("Definition not found", path="/tmp/def.yaml")
        # Output: Error: Definition not found (path=/tmp/def.yaml)
    """
    click.echo(_with_context("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr and exit with ``exit_code``.

    Raises:
        SystemExit: Always.
    """
    error(message, **context)
    sys.exit(exit_code)


def success(message: str) -> None:
    """Print a success message to stderr."""
    click.echo(message, err=True)


def info(message: str) -> None:
    """Print an informational message to stderr."""
    click.echo(message, err=True)


__all__ = ["ExitCode", "error", "error_exit", "success", "info"]
