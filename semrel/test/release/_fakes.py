from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from semrel.core.config import BranchConfig
from semrel.core.result import Err, Ok, Result
from semrel.git.repository import Commit, GitError
from semrel.output.console import MockConsole
from semrel.platform.ci import CiEnvironment, CiProvider
from semrel.release.branches import resolve_branches
from semrel.release.collaborators import ReleaseCollaborators
from semrel.release.context import NO_RELEASE, LastRelease, ReleaseOptions
from semrel.release.pipeline import ReleasePipeline
from semrel.release.plugins import ExtensionPoint, PluginHandler, PluginRegistry, PluginStep
from semrel.release.semver import next_version

HEAD = "a" * 40


def _empty_calls() -> list[tuple[str, ...]]:
    return []


@dataclass
class FakeGit:
    """In-memory git: records mutations, HEAD can be moved by tests."""

    head_sha: str = HEAD
    can_push: bool = True
    fail_push: bool = False
    calls: list[tuple[str, ...]] = field(default_factory=_empty_calls)

    def unshallow(self) -> Result[None, GitError]:
        self.calls.append(("unshallow",))
        return Ok(None)

    def verify_auth(self, repository_url: str, branch: str = "HEAD") -> bool:
        self.calls.append(("verify_auth", repository_url, branch))
        return self.can_push

    def head(self) -> Result[str, GitError]:
        return Ok(self.head_sha)

    def tag(self, name: str, ref: str = "HEAD") -> Result[None, GitError]:
        self.calls.append(("tag", name, ref))
        return Ok(None)

    def push(self, repository_url: str, branch: str) -> Result[None, GitError]:
        self.calls.append(("push", repository_url, branch))
        if self.fail_push:
            return Err(GitError(command="push", message="rejected"))
        return Ok(None)

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] in {"tag", "push"}]


def make_collaborators(
    *,
    tags: Sequence[str] = ("v1.2.0",),
    last_release: LastRelease | None = None,
    commits: Sequence[Commit] = (Commit(hash="c1", message="feat: add thing"),),
) -> ReleaseCollaborators:
    last = last_release
    if last is None:
        last = LastRelease(version="1.2.0", git_head="b" * 40, git_tag="v1.2.0") if tags else NO_RELEASE

    return ReleaseCollaborators(
        verify=lambda options: None,
        get_tags=lambda: list(tags),
        get_last_release=lambda _tags, _fmt: last,
        get_commits=lambda _since: list(commits),
        next_version=next_version,
        resolve_branches=resolve_branches,
    )


def make_options(**overrides: object) -> ReleaseOptions:
    values: dict[str, object] = {
        "repository_url": "https://example.com/owner/repo.git",
        "tag_format": "v${version}",
        "dry_run": False,
        "no_ci": False,
        "branches": (BranchConfig(name="main"), BranchConfig(name="next")),
    }
    values.update(overrides)
    return ReleaseOptions(**values)  # type: ignore[arg-type]


def ci_on(branch: str = "main", *, is_pr: bool = False) -> CiEnvironment:
    return CiEnvironment(provider=CiProvider.GITHUB_ACTIONS, is_ci=True, branch=branch, is_pr=is_pr)


def registry_of(*entries: tuple[ExtensionPoint, str, PluginHandler]) -> PluginRegistry:
    return PluginRegistry(PluginStep(name=name, point=point, handler=h) for point, name, h in entries)


def make_pipeline(
    *,
    registry: PluginRegistry,
    git: FakeGit | None = None,
    collaborators: ReleaseCollaborators | None = None,
    options: ReleaseOptions | None = None,
    ci: CiEnvironment | None = None,
    console: MockConsole | None = None,
) -> ReleasePipeline:
    return ReleasePipeline(
        options=options or make_options(),
        registry=registry,
        git=git or FakeGit(),
        collaborators=collaborators or make_collaborators(),
        console=console or MockConsole(),
        ci=ci or ci_on(),
    )
