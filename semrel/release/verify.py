"""Repository and option checks run before any release phase."""

from __future__ import annotations

import re
from pathlib import Path

from semrel.git.repository import Repository
from semrel.release.context import ReleaseOptions
from semrel.release.errors import AggregateFailure, ReleaseFailure
from semrel.release.failures import get_failure
from semrel.release.history import VERSION_PLACEHOLDER, render_tag

__all__ = ["is_valid_tag_name", "verify_options"]

_FORBIDDEN_REF_CHARS = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def is_valid_tag_name(name: str) -> bool:
    """Subset of `git check-ref-format` rules for a tag name."""
    if not name or name.startswith(("-", "/", ".")) or name.endswith(("/", ".", ".lock")):
        return False
    if ".." in name or "@{" in name or "//" in name or name == "@":
        return False
    if any(part.startswith(".") for part in name.split("/")):
        return False
    return _FORBIDDEN_REF_CHARS.search(name) is None


def verify_options(repo: Repository, options: ReleaseOptions, *, cwd: Path) -> None:
    """Check the repository and release options.

    Raises:
        AggregateFailure: holding one ReleaseFailure per problem found.
    """
    failures: list[ReleaseFailure] = []

    if not repo.exists():
        failures.append(get_failure("ENOGITREPO", cwd=cwd))

    if not options.repository_url:
        failures.append(get_failure("ENOREPOURL"))

    if options.tag_format.count(VERSION_PLACEHOLDER) != 1:
        failures.append(get_failure("ETAGNOVERSION", tag_format=options.tag_format))
    elif not is_valid_tag_name(render_tag(options.tag_format, "0.0.0")):
        failures.append(get_failure("EINVALIDTAGFORMAT", tag_format=options.tag_format))

    if failures:
        raise AggregateFailure("invalid release configuration", failures)
