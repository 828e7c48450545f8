"""Failure types raised by the release engine.

- ReleaseFailure: classified failure with a stable code; routed to the
  `fail` plugins.
- AggregateFailure: every failure collected from a settle-all phase.
- Anything else is an unexpected (internal) failure.
"""

from __future__ import annotations

__all__ = ["ReleaseFailure", "AggregateFailure"]


class ReleaseFailure(Exception):
    """A classified, reportable release failure.

    Plugins raise this to report expected problems (missing credentials, bad
    configuration) with a stable code and optional markdown `details`.
    """

    def __init__(self, code: str, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"ReleaseFailure(code={self.code!r}, message={self.message!r})"


class AggregateFailure(ExceptionGroup):
    """Failures collected from every plugin of a settle-all phase."""

    def derive(self, excs):  # type: ignore[no-untyped-def]
        return AggregateFailure(self.message, excs)
