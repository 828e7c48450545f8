"""Sensitive value redaction on the process output streams.

While `hide_sensitive_output()` is active, anything written to `sys.stdout`
or `sys.stderr` has the values of secret-looking environment variables
replaced with `[secure]`.
"""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TextIO

__all__ = [
    "SECURE_PLACEHOLDER",
    "hide_sensitive",
    "hide_sensitive_output",
    "redact_active",
    "sensitive_values",
]

SECURE_PLACEHOLDER = "[secure]"

_SENSITIVE_NAME_RE = re.compile(r"token|password|credential|secret|private", re.IGNORECASE)
# Short values would blank out ordinary words.
_MIN_SECRET_LENGTH = 5

# Pattern of the innermost active hide_sensitive_output() scope.
_ACTIVE_PATTERN: ContextVar[re.Pattern[str] | None] = ContextVar("semrel_redaction", default=None)


def sensitive_values(env: Mapping[str, str]) -> list[str]:
    """Values of env vars whose names look secret, longest first."""
    values = {
        value
        for name, value in env.items()
        if _SENSITIVE_NAME_RE.search(name) and len(value.strip()) >= _MIN_SECRET_LENGTH
    }
    return sorted(values, key=len, reverse=True)


def hide_sensitive(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace every sensitive value found in `text`."""
    values = sensitive_values(os.environ if env is None else env)
    if not values:
        return text
    pattern = re.compile("|".join(re.escape(v) for v in values))
    return pattern.sub(SECURE_PLACEHOLDER, text)


def redact_active(text: str) -> str:
    """Redact `text` with the enclosing `hide_sensitive_output()` scope, if any.

    Renderers call this before laying text out: once wrapped across lines a
    secret no longer matches on the stream.
    """
    pattern = _ACTIVE_PATTERN.get()
    if pattern is None:
        return text
    return pattern.sub(SECURE_PLACEHOLDER, text)


class _RedactingStream:
    """Text stream proxy that redacts on write."""

    def __init__(self, inner: TextIO, pattern: re.Pattern[str] | None) -> None:
        self._inner = inner
        self._pattern = pattern

    def write(self, text: str) -> int:
        if self._pattern is not None:
            text = self._pattern.sub(SECURE_PLACEHOLDER, text)
        return self._inner.write(text)

    def writelines(self, lines: list[str]) -> None:
        for line in lines:
            self.write(line)

    def __getattr__(self, name: str) -> object:
        return getattr(self._inner, name)


@contextmanager
def hide_sensitive_output(env: Mapping[str, str] | None = None) -> Iterator[None]:
    """Redact secrets from stdout/stderr for the duration of the block.

    The original streams are restored on every exit path.
    """
    values = sensitive_values(os.environ if env is None else env)
    pattern = re.compile("|".join(re.escape(v) for v in values)) if values else None

    original_out, original_err = sys.stdout, sys.stderr
    sys.stdout = _RedactingStream(original_out, pattern)  # type: ignore[assignment]
    sys.stderr = _RedactingStream(original_err, pattern)  # type: ignore[assignment]
    token = _ACTIVE_PATTERN.set(pattern)
    try:
        yield
    finally:
        _ACTIVE_PATTERN.reset(token)
        sys.stdout, sys.stderr = original_out, original_err
