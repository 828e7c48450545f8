from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from semrel.core.config import ReleaseConfig, load_config, load_config_or_default
from semrel.core.errors import ErrorCode
from semrel.core.result import Err
from semrel.git.repository import Repository
from semrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    repo: Repository
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(*, root: Path | None = None, config_path: Path | None = None) -> CLIContext:
    root = (root or Path.cwd()).resolve()

    config_result = load_config(config_path) if config_path else load_config_or_default(root)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        root=root,
        repo=Repository(root),
        config=config_result.value,
        console=RichConsole(),
    )
