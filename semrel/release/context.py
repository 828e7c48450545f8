"""Release context: the data threaded through every phase of one run.

The pipeline owns a single ReleaseContext per run. Plugins never see it
directly; they receive a frozen `PluginInput` snapshot built from it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from semrel.core.config import BranchConfig
from semrel.git.repository import Commit
from semrel.output.console import ConsoleProtocol

__all__ = [
    "BranchSpec",
    "Commit",
    "LastRelease",
    "NO_RELEASE",
    "NextRelease",
    "PluginInput",
    "ReleaseContext",
    "ReleaseOptions",
    "ReleaseType",
]

ReleaseType = Literal["major", "minor", "patch"]


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Run configuration; never modified once a run has started."""

    repository_url: str
    tag_format: str
    dry_run: bool = False
    no_ci: bool = False
    branches: tuple[BranchConfig, ...] = ()


@dataclass(frozen=True, slots=True)
class BranchSpec:
    """A normalized release branch.

    `channel` is None for the default channel.
    """

    name: str
    channel: str | None = None
    range: str | None = None


@dataclass(frozen=True, slots=True)
class LastRelease:
    """The most recent release on the branch; falsy when there is none."""

    version: str | None = None
    git_head: str | None = None
    git_tag: str | None = None
    channel: str | None = None

    def __bool__(self) -> bool:
        return self.version is not None


NO_RELEASE = LastRelease()


@dataclass(frozen=True, slots=True)
class NextRelease:
    type: ReleaseType
    version: str
    channel: str | None
    git_head: str
    git_tag: str
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class PluginInput:
    """What a plugin receives: a read-only view of the run.

    `console` is the logger handle. `releases` is only filled for `success`
    and `errors` only for `fail`.
    """

    options: ReleaseOptions
    console: ConsoleProtocol
    last_release: LastRelease = NO_RELEASE
    commits: tuple[Commit, ...] = ()
    next_release: NextRelease | None = None
    releases: tuple[object, ...] = ()
    errors: tuple[Exception, ...] = ()


class ReleaseContext:
    """Mutable per-run record.

    `last_release` and `commits` are assigned once; only `next_release`
    evolves after that.
    """

    def __init__(self, options: ReleaseOptions, console: ConsoleProtocol) -> None:
        self.options = options
        self.console = console
        self.branches: tuple[BranchSpec, ...] = ()
        self.branch: BranchSpec | None = None
        self.releases: tuple[object, ...] = ()
        self._last_release: LastRelease | None = None
        self._commits: tuple[Commit, ...] | None = None
        self._next_release: NextRelease | None = None

    @property
    def last_release(self) -> LastRelease:
        return self._last_release if self._last_release is not None else NO_RELEASE

    @last_release.setter
    def last_release(self, value: LastRelease) -> None:
        if self._last_release is not None:
            raise RuntimeError("last_release is already set for this run")
        self._last_release = value

    @property
    def commits(self) -> tuple[Commit, ...]:
        return self._commits if self._commits is not None else ()

    @commits.setter
    def commits(self, value: tuple[Commit, ...] | list[Commit]) -> None:
        if self._commits is not None:
            raise RuntimeError("commits are already set for this run")
        self._commits = tuple(value)

    @property
    def next_release(self) -> NextRelease | None:
        return self._next_release

    def set_next_release(self, value: NextRelease) -> None:
        if self._next_release is not None:
            raise RuntimeError("next_release is already decided for this run")
        self._next_release = value

    def update_next_release(self, **changes: object) -> NextRelease:
        """Replace fields of the decided next release (notes, git_head)."""
        if self._next_release is None:
            raise RuntimeError("no next_release to update")
        self._next_release = replace(self._next_release, **changes)  # type: ignore[arg-type]
        return self._next_release

    def plugin_input(self, **overrides: object) -> PluginInput:
        """Snapshot the context for a plugin invocation."""
        snapshot = PluginInput(
            options=self.options,
            console=self.console,
            last_release=self.last_release,
            commits=self.commits,
            next_release=self.next_release,
        )
        return replace(snapshot, **overrides) if overrides else snapshot  # type: ignore[arg-type]
