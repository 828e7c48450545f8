"""Release pipeline orchestrator.

Phases run strictly in order; the first failure aborts everything after it:

    preflight -> verify -> unshallow + branches -> authorization
    -> verifyConditions -> last release + commits -> analyzeCommits
    -> next version -> verifyRelease -> generateNotes -> (dry run stops here)
    -> prepare (notes refreshed whenever HEAD moves) -> tag + push
    -> publish -> success

`run()` returns True when a release was made (or previewed in dry-run
mode), False when the branch is not a release branch, and None when there is
nothing to release (pull request build, no relevant changes).
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import TypeVar

from semrel.core.result import Err, Result
from semrel.git.repository import GitError
from semrel.output.console import ConsoleProtocol, Style
from semrel.platform.ci import CiEnvironment
from semrel.release.branches import find_branch
from semrel.release.collaborators import ReleaseCollaborators, ReleaseGit
from semrel.release.context import (
    NextRelease,
    PluginInput,
    ReleaseContext,
    ReleaseOptions,
    ReleaseType,
)
from semrel.release.failures import get_failure
from semrel.release.history import render_tag
from semrel.release.plugins import (
    ExtensionPoint,
    PluginRegistry,
    PluginStep,
    highest_release_type,
    join_notes,
    merge_release,
    run_sequence,
    settle_all,
)

T = TypeVar("T")

__all__ = ["ReleasePipeline", "SKIP_RELEASE_RE"]

SKIP_RELEASE_RE = re.compile(r"\[skip\s+release\]|\[release\s+skip\]", re.IGNORECASE)


class ReleasePipeline:
    """One release run.

    `options` may be replaced once during preflight (forced dry run); it is
    fixed before any later phase reads it.
    """

    def __init__(
        self,
        *,
        options: ReleaseOptions,
        registry: PluginRegistry,
        git: ReleaseGit,
        collaborators: ReleaseCollaborators,
        console: ConsoleProtocol,
        ci: CiEnvironment,
    ) -> None:
        self.options = options
        self.context: ReleaseContext | None = None
        self._registry = registry
        self._git = git
        self._collab = collaborators
        self._console = console
        self._ci = ci

    def run(self) -> bool | None:
        if not self._preflight():
            return None

        ctx = ReleaseContext(self.options, self._console)
        self.context = ctx
        options = ctx.options

        self._collab.verify(options)
        self._require(self._git.unshallow())

        tags = self._collab.get_tags()
        ctx.branches = tuple(
            self._collab.resolve_branches(tags, options.branches, options.tag_format)
        )

        branch = find_branch(ctx.branches, self._ci.branch)
        if branch is None:
            names = ", ".join(b.name for b in ctx.branches)
            self._console.info(
                f"This run was triggered on the branch {self._ci.branch}, while semrel is "
                f"configured to only publish from {names}, therefore a new version won't be "
                "published."
            )
            return False
        ctx.branch = branch

        if not self._git.verify_auth(options.repository_url, branch.name):
            raise get_failure(
                "EGITNOPERMISSION", branch=branch.name, repository_url=options.repository_url
            )

        self._console.info(f"Run automated release from branch {branch.name}")
        self._settle(ExtensionPoint.VERIFY_CONDITIONS, ctx.plugin_input())

        ctx.last_release = self._collab.get_last_release(tags, options.tag_format)
        ctx.commits = self._collab.get_commits(ctx.last_release.git_head)

        release_type = self._analyze_commits(ctx)
        if not release_type:
            self._console.info("There are no relevant changes, so no new version is released.")
            return None

        version = self._collab.next_version(release_type, ctx.last_release)
        ctx.set_next_release(
            NextRelease(
                type=release_type,
                version=version,
                channel=branch.channel,
                git_head=self._head(),
                git_tag=render_tag(options.tag_format, version),
            )
        )

        self._settle(ExtensionPoint.VERIFY_RELEASE, ctx.plugin_input())
        notes = self._generate_notes(ctx)

        if options.dry_run:
            self._console.info(f"Release note for version {version}:")
            self._console.markdown(notes)
            return True

        self._prepare(ctx)

        next_release = self._next_release(ctx)
        self._console.info(f"Create tag {next_release.git_tag}")
        self._require(self._git.tag(next_release.git_tag, next_release.git_head))
        self._require(self._git.push(options.repository_url, branch.name))

        ctx.releases = tuple(self._publish(ctx))
        self._settle(ExtensionPoint.SUCCESS, ctx.plugin_input(releases=ctx.releases))

        self._console.success(f"Published release: {next_release.version}")
        return True

    def _preflight(self) -> bool:
        """Force dry-run outside CI; skip pull request builds."""
        if not self._ci.is_ci and not self.options.dry_run and not self.options.no_ci:
            self._console.info(
                "This run was not triggered in a known CI environment, running in dry-run mode."
            )
            self.options = replace(self.options, dry_run=True)

        if self._ci.is_ci and self._ci.is_pr and not self.options.no_ci:
            self._console.info(
                "This run was triggered by a pull request and therefore a new version "
                "won't be published."
            )
            return False
        return True

    def _analyze_commits(self, ctx: ReleaseContext) -> ReleaseType | None:
        relevant = tuple(c for c in ctx.commits if not SKIP_RELEASE_RE.search(c.message))
        skipped = len(ctx.commits) - len(relevant)
        if skipped:
            self._console.print(f"Skipping {skipped} commit(s) marked to skip release", Style.DIM)
        results = run_sequence(
            self._steps(ExtensionPoint.ANALYZE_COMMITS), ctx.plugin_input(commits=relevant)
        )
        return highest_release_type(results)

    def _generate_notes(self, ctx: ReleaseContext) -> str:
        results = run_sequence(self._steps(ExtensionPoint.GENERATE_NOTES), ctx.plugin_input())
        notes = join_notes(results)
        ctx.update_next_release(notes=notes)
        return notes

    def _prepare(self, ctx: ReleaseContext) -> None:
        def next_input(_current: PluginInput, _result: object) -> PluginInput:
            return self._refresh_after_prepare(ctx)

        run_sequence(
            self._steps(ExtensionPoint.PREPARE), ctx.plugin_input(), next_input=next_input
        )

    def _refresh_after_prepare(self, ctx: ReleaseContext) -> PluginInput:
        """A prepare step may have committed: follow HEAD and regenerate notes."""
        head = self._head()
        if head != self._next_release(ctx).git_head:
            self._console.print(f"HEAD moved to {head[:7]}, regenerating release notes", Style.DIM)
            ctx.update_next_release(git_head=head)
            self._generate_notes(ctx)
        return ctx.plugin_input()

    def _publish(self, ctx: ReleaseContext) -> list[object]:
        next_release = self._next_release(ctx)

        def decorate(result: object, step: PluginStep) -> object:
            return merge_release(result, next_release, step)

        return run_sequence(
            self._steps(ExtensionPoint.PUBLISH), ctx.plugin_input(), transform=decorate
        )

    def _settle(self, point: ExtensionPoint, plugin_input: PluginInput) -> list[object]:
        return settle_all(self._steps(point), plugin_input)

    def _steps(self, point: ExtensionPoint) -> tuple[PluginStep, ...]:
        steps = self._registry.steps(point)
        self._console.print(f"Call plugin {point} ({len(steps)} registered)", Style.DIM)
        return steps

    def _head(self) -> str:
        return self._require(self._git.head())

    @staticmethod
    def _next_release(ctx: ReleaseContext) -> NextRelease:
        next_release = ctx.next_release
        assert next_release is not None
        return next_release

    @staticmethod
    def _require(result: Result[T, GitError]) -> T:
        if isinstance(result, Err):
            raise get_failure(
                "EGITFAILED", command=result.error.command, output=result.error.message
            )
        return result.value
