"""Failure reporting for an aborted release run.

A failure may be an AggregateFailure wrapping several others; reporting
works on the flattened list. Classified failures (ReleaseFailure) are sent
to the `fail` plugins and logged before any unexpected error.
"""

from __future__ import annotations

from dataclasses import replace

from semrel.output.console import ConsoleProtocol
from semrel.output.errors import print_internal_error, print_release_failure
from semrel.release.context import PluginInput
from semrel.release.errors import ReleaseFailure
from semrel.release.plugins import ExtensionPoint, PluginRegistry, settle_all

__all__ = ["call_fail", "extract_failures", "log_failures", "partition_failures"]


def extract_failures(error: BaseException) -> list[BaseException]:
    """Flatten exception groups into their leaf failures, in order."""
    if isinstance(error, BaseExceptionGroup):
        leaves: list[BaseException] = []
        for inner in error.exceptions:
            leaves.extend(extract_failures(inner))
        return leaves
    return [error]


def partition_failures(
    errors: list[BaseException],
) -> tuple[list[ReleaseFailure], list[BaseException]]:
    """Split into (classified, unexpected), keeping the order within each."""
    classified = [e for e in errors if isinstance(e, ReleaseFailure)]
    unexpected = [e for e in errors if not isinstance(e, ReleaseFailure)]
    return classified, unexpected


def log_failures(error: BaseException, console: ConsoleProtocol) -> None:
    classified, unexpected = partition_failures(extract_failures(error))
    for failure in classified:
        print_release_failure(failure, console)
    for other in unexpected:
        print_internal_error(other, console)


def call_fail(
    registry: PluginRegistry,
    plugin_input: PluginInput,
    error: BaseException,
    console: ConsoleProtocol,
) -> None:
    """Notify the `fail` plugins of the classified failures.

    Never raises: a failing `fail` plugin is logged instead.
    """
    classified, _ = partition_failures(extract_failures(error))
    if not classified:
        return

    try:
        settle_all(
            registry.steps(ExtensionPoint.FAIL),
            replace(plugin_input, errors=tuple(classified)),
        )
    except Exception as fail_error:
        log_failures(fail_error, console)
