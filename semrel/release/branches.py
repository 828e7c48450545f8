"""Branch eligibility: which branches may release, and on which channel.

Resolution is deterministic for a given tag history and configuration and
never touches the repository.

- The first release branch publishes on the default channel (None).
- Other branches publish on a channel named after them unless configured.
- Maintenance branches (`1.x`, `1.2.x`) are limited to their version range;
  release branches accept anything from the highest released version up.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence

from semrel.core.config import BranchConfig
from semrel.release.context import BranchSpec
from semrel.release.failures import get_failure
from semrel.release.history import tag_regex
from semrel.release.semver import FIRST_RELEASE, parse_version

__all__ = ["find_branch", "is_maintenance", "resolve_branches"]

_MAINTENANCE_RE = re.compile(r"^(0|[1-9]\d*)\.(?:(0|[1-9]\d*)\.)?x$")


def is_maintenance(name: str) -> bool:
    return _MAINTENANCE_RE.match(name) is not None


def _maintenance_range(name: str) -> str:
    m = _MAINTENANCE_RE.match(name)
    assert m is not None
    major = int(m.group(1))
    if m.group(2) is None:
        return f">={major}.0.0 <{major + 1}.0.0"
    minor = int(m.group(2))
    return f">={major}.{minor}.0 <{major}.{minor + 1}.0"


def _highest_version(tags: Sequence[str], tag_format: str) -> str:
    pattern = tag_regex(tag_format)
    versions = []
    for tag in tags:
        m = pattern.match(tag)
        version = parse_version(m.group(1)) if m else None
        if version is not None and not version.prerelease:
            versions.append(version)
    if not versions:
        return FIRST_RELEASE
    return str(max(versions, key=lambda v: v.sort_key))


def resolve_branches(
    tags: Sequence[str],
    configured: Sequence[BranchConfig],
    tag_format: str,
) -> list[BranchSpec]:
    """Normalize the configured branches against the tag history.

    Raises:
        ReleaseFailure: EDUPLICATEBRANCHES or ENORELEASEBRANCHES.
    """
    counts = Counter(b.name for b in configured)
    duplicates = sorted(name for name, n in counts.items() if n > 1)
    if duplicates:
        raise get_failure(
            "EDUPLICATEBRANCHES", duplicates=", ".join(f"`{d}`" for d in duplicates)
        )

    release_branches = [b for b in configured if not is_maintenance(b.name)]
    if not release_branches:
        raise get_failure("ENORELEASEBRANCHES")

    default_name = release_branches[0].name
    release_range = f">={_highest_version(tags, tag_format)}"

    out: list[BranchSpec] = []
    for branch in configured:
        if is_maintenance(branch.name):
            channel = branch.channel or branch.name
            range_ = branch.range or _maintenance_range(branch.name)
        elif branch.name == default_name:
            channel = branch.channel
            range_ = branch.range or release_range
        else:
            channel = branch.channel or branch.name
            range_ = branch.range or release_range
        out.append(BranchSpec(name=branch.name, channel=channel, range=range_))
    return out


def find_branch(branches: Sequence[BranchSpec], name: str | None) -> BranchSpec | None:
    if name is None:
        return None
    for branch in branches:
        if branch.name == name:
            return branch
    return None
