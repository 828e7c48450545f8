"""External collaborators used by the release pipeline.

The pipeline only depends on these call signatures; `default_collaborators`
wires them to git for a real run, tests substitute fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from semrel.core.config import BranchConfig
from semrel.core.result import Err, Result
from semrel.git.repository import Commit, GitError, Repository
from semrel.release import branches, history, semver
from semrel.release.context import BranchSpec, LastRelease, ReleaseOptions, ReleaseType
from semrel.release.failures import get_failure
from semrel.release.verify import verify_options

__all__ = ["ReleaseCollaborators", "ReleaseGit", "default_collaborators"]


class ReleaseGit(Protocol):
    """Git operations the pipeline performs directly."""

    def unshallow(self) -> Result[None, GitError]: ...

    def verify_auth(self, repository_url: str, branch: str = "HEAD") -> bool: ...

    def head(self) -> Result[str, GitError]: ...

    def tag(self, name: str, ref: str = "HEAD") -> Result[None, GitError]: ...

    def push(self, repository_url: str, branch: str) -> Result[None, GitError]: ...


@dataclass(frozen=True, slots=True)
class ReleaseCollaborators:
    verify: Callable[[ReleaseOptions], None]
    get_tags: Callable[[], list[str]]
    get_last_release: Callable[[list[str], str], LastRelease]
    get_commits: Callable[[str | None], list[Commit]]
    next_version: Callable[[ReleaseType, LastRelease], str]
    resolve_branches: Callable[[Sequence[str], Sequence[BranchConfig], str], list[BranchSpec]]


def default_collaborators(repo: Repository, *, cwd: Path) -> ReleaseCollaborators:
    def get_tags() -> list[str]:
        result = repo.tags()
        if isinstance(result, Err):
            raise get_failure("EGITFAILED", command=result.error.command, output=result.error.message)
        return result.value

    return ReleaseCollaborators(
        verify=lambda options: verify_options(repo, options, cwd=cwd),
        get_tags=get_tags,
        get_last_release=lambda tags, tag_format: history.last_release_from_tags(
            repo, tags, tag_format
        ),
        get_commits=lambda git_head: history.commits_since(repo, git_head),
        next_version=semver.next_version,
        resolve_branches=branches.resolve_branches,
    )
