from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import typer

from semrel.cli.commands._helpers import exit_on_error, failure_exit_code
from semrel.cli.context import build_context
from semrel.core.config import BranchConfig, ReleaseConfig
from semrel.release.plugins import PluginRegistry
from semrel.release.service import release


def _apply_overrides(
    config: ReleaseConfig,
    *,
    dry_run: bool,
    no_ci: bool,
    repository_url: str | None,
    tag_format: str | None,
    branches: list[str],
    plugins: list[str],
) -> ReleaseConfig:
    return replace(
        config,
        dry_run=config.dry_run or dry_run,
        no_ci=config.no_ci or no_ci,
        repository_url=repository_url or config.repository_url,
        tag_format=tag_format or config.tag_format,
        branches=tuple(BranchConfig(name=b) for b in branches) if branches else config.branches,
        plugins=(*config.plugins, *(p for p in plugins if p not in config.plugins)),
    )


def run(
    dry_run: bool = typer.Option(False, "--dry-run", help="Compute the release and print notes only."),
    no_ci: bool = typer.Option(False, "--no-ci", help="Skip CI environment checks."),
    repository_url: str | None = typer.Option(None, "--repository-url", help="Remote to push to."),
    tag_format: str | None = typer.Option(None, "--tag-format", help="Tag template, e.g. v${version}."),
    branch: list[str] | None = typer.Option(None, "--branch", "-b", help="Release branch (repeatable)."),
    plugin: list[str] | None = typer.Option(None, "--plugin", "-p", help="Plugin module (repeatable)."),
    config: Path | None = typer.Option(None, "--config", help="Config file (default: auto detect)."),
) -> None:
    """Analyze commits since the last release and publish a new version."""
    ctx = build_context(config_path=config)
    settings = _apply_overrides(
        ctx.config,
        dry_run=dry_run,
        no_ci=no_ci,
        repository_url=repository_url,
        tag_format=tag_format,
        branches=branch or [],
        plugins=plugin or [],
    )
    registry = exit_on_error(PluginRegistry.from_modules(settings.plugins), ctx)

    try:
        release(settings, repo=ctx.repo, registry=registry, console=ctx.console)
    except Exception as e:
        raise typer.Exit(code=int(failure_exit_code(e))) from e
