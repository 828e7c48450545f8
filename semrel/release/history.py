"""Tag and commit history: last release lookup and commit retrieval."""

from __future__ import annotations

import re
from string import Template

from semrel.core.result import Err
from semrel.git.repository import Commit, Repository
from semrel.release.context import NO_RELEASE, LastRelease
from semrel.release.failures import get_failure
from semrel.release.semver import SEMVER_PATTERN, parse_version

__all__ = [
    "VERSION_PLACEHOLDER",
    "commits_since",
    "last_release_from_tags",
    "render_tag",
    "tag_regex",
]

VERSION_PLACEHOLDER = "${version}"


def render_tag(tag_format: str, version: str) -> str:
    """Apply a tag format such as `v${version}` to a version."""
    return Template(tag_format).safe_substitute(version=version)


def tag_regex(tag_format: str) -> re.Pattern[str]:
    """Regex matching tags produced by `tag_format`; group 1 is the version."""
    before, _, after = tag_format.partition(VERSION_PLACEHOLDER)
    return re.compile(f"^{re.escape(before)}({SEMVER_PATTERN}){re.escape(after)}$")


def last_release_from_tags(
    repo: Repository,
    tags: list[str],
    tag_format: str,
) -> LastRelease:
    """Highest non-prerelease version among `tags` matching the tag format."""
    pattern = tag_regex(tag_format)
    best = None
    best_tag: str | None = None
    for tag in tags:
        m = pattern.match(tag)
        if m is None:
            continue
        version = parse_version(m.group(1))
        if version is None or version.prerelease:
            continue
        if best is None or version.sort_key > best.sort_key:
            best, best_tag = version, tag

    if best is None or best_tag is None:
        return NO_RELEASE

    head = repo.tag_head(best_tag)
    if isinstance(head, Err):
        raise get_failure("EGITFAILED", command=head.error.command, output=head.error.message)
    return LastRelease(version=str(best), git_head=head.value, git_tag=best_tag)


def commits_since(repo: Repository, git_head: str | None) -> list[Commit]:
    """Commits on HEAD since the last release head (all commits if None)."""
    result = repo.commits_since(git_head)
    if isinstance(result, Err):
        raise get_failure("EGITFAILED", command=result.error.command, output=result.error.message)
    return result.value
