"""Failure presentation for release runs."""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING

from semrel.output.console import Style
from semrel.release.errors import ReleaseFailure

if TYPE_CHECKING:
    from semrel.output.console import ConsoleProtocol

__all__ = ["print_internal_error", "print_release_failure"]


def print_release_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    """Print `<CODE> <message>` and the markdown details, if any."""
    console.error(f"{failure.code} {failure.message}")
    if failure.details:
        console.markdown(failure.details)


def print_internal_error(error: BaseException, console: ConsoleProtocol) -> None:
    console.error(f"An error occurred while running semrel: {error!r}")
    formatted = "".join(traceback.format_exception(error)).rstrip()
    if formatted:
        console.print(formatted, Style.DIM)
