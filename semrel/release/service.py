"""Entry point for one release run: pipeline plus failure reporting."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from semrel import __version__
from semrel.core.config import ReleaseConfig
from semrel.git.repository import Repository
from semrel.output.console import ConsoleProtocol, Style
from semrel.output.redact import hide_sensitive_output
from semrel.platform.ci import CiEnvironment, detect_ci
from semrel.release.collaborators import (
    ReleaseCollaborators,
    ReleaseGit,
    default_collaborators,
)
from semrel.release.context import PluginInput, ReleaseOptions
from semrel.release.pipeline import ReleasePipeline
from semrel.release.plugins import PluginRegistry
from semrel.release.report import call_fail, log_failures

__all__ = ["build_options", "release"]


def build_options(config: ReleaseConfig, repo: Repository) -> ReleaseOptions:
    """Freeze the run options, falling back to the `origin` remote URL."""
    return ReleaseOptions(
        repository_url=config.repository_url or repo.remote_url() or "",
        tag_format=config.tag_format,
        dry_run=config.dry_run,
        no_ci=config.no_ci,
        branches=config.branches,
    )


def release(
    config: ReleaseConfig,
    *,
    repo: Repository,
    registry: PluginRegistry,
    console: ConsoleProtocol,
    ci: CiEnvironment | None = None,
    git: ReleaseGit | None = None,
    collaborators: ReleaseCollaborators | None = None,
    env: Mapping[str, str] | None = None,
) -> bool | None:
    """Run a release and report any failure.

    The original failure is always re-raised after reporting so callers can
    turn it into an exit code.
    """
    console.print(f"Running semrel version {__version__}", Style.DIM)

    with hide_sensitive_output(env):
        ci = ci or detect_ci(env)
        if ci.branch is None:
            ci = replace(ci, branch=repo.current_branch())

        pipeline = ReleasePipeline(
            options=build_options(config, repo),
            registry=registry,
            git=git or repo,
            collaborators=collaborators or default_collaborators(repo, cwd=Path(os.getcwd())),
            console=console,
            ci=ci,
        )
        try:
            return pipeline.run()
        except Exception as err:
            # Dry runs never notify the fail plugins.
            if not pipeline.options.dry_run:
                fail_input = (
                    pipeline.context.plugin_input()
                    if pipeline.context is not None
                    else PluginInput(options=pipeline.options, console=console)
                )
                call_fail(registry, fail_input, err, console)
            log_failures(err, console)
            raise
