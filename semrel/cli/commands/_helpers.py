"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from semrel.core.errors import ErrorCode
from semrel.core.result import Err, Result
from semrel.release.report import extract_failures, partition_failures

if TYPE_CHECKING:
    from semrel.cli.context import CLIContext

T = TypeVar("T")
E = TypeVar("E")


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or print the error and exit.

    Expects error objects to have a 'message' attribute.
    """
    if isinstance(result, Err):
        message: str = getattr(result.error, "message", str(result.error))
        ctx.console.error(message)
        raise typer.Exit(code=int(error_code))
    return result.value


def failure_exit_code(error: BaseException) -> ErrorCode:
    """RELEASE_ERROR when every failure is classified, INTERNAL_ERROR otherwise."""
    _, unexpected = partition_failures(extract_failures(error))
    return ErrorCode.INTERNAL_ERROR if unexpected else ErrorCode.RELEASE_ERROR
