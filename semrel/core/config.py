"""Typed release configuration loading.

Configuration comes from either a `.semrel.toml` file (root table) or the
`[tool.semrel]` table of `pyproject.toml`. Example:

    repository_url = "git@github.com:owner/project.git"
    tag_format = "v${version}"
    plugins = ["semrel_plugins.changelog"]
    branches = ["main", { name = "next", channel = "next" }, "1.x"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "BranchConfig",
    "ConfigError",
    "ReleaseConfig",
    "CONFIG_FILE_NAME",
    "DEFAULT_TAG_FORMAT",
    "find_config",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".semrel.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"

DEFAULT_TAG_FORMAT = "v${version}"
DEFAULT_BRANCH = "main"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BranchConfig:
    """A release branch as written in the config (before normalization)."""

    name: str
    channel: str | None = None
    range: str | None = None


def _default_branches() -> tuple[BranchConfig, ...]:
    return (BranchConfig(name=DEFAULT_BRANCH),)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Run configuration before CLI overrides are applied."""

    repository_url: str | None = None
    tag_format: str = DEFAULT_TAG_FORMAT
    dry_run: bool = False
    no_ci: bool = False
    branches: tuple[BranchConfig, ...] = field(default_factory=_default_branches)
    plugins: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: if `branches` or `plugins` has an invalid shape.
        """
        ci = get_bool(data, "ci")
        plugins: list[str] = []
        if "plugins" in data:
            parsed = get_str_list(data, "plugins")
            if parsed is None:
                raise ValueError("'plugins' must be a list of module names")
            plugins = parsed

        branches = _default_branches()
        if "branches" in data:
            branches = _parse_branches(get_list(data, "branches"))

        return cls(
            repository_url=get_str(data, "repository_url"),
            tag_format=get_str(data, "tag_format") or DEFAULT_TAG_FORMAT,
            dry_run=get_bool(data, "dry_run") or False,
            no_ci=ci is False,
            branches=branches,
            plugins=tuple(plugins),
        )


def _parse_branches(items: list[object] | None) -> tuple[BranchConfig, ...]:
    if items is None:
        raise ValueError("'branches' must be a list")

    out: list[BranchConfig] = []
    for item in items:
        if isinstance(item, str):
            if item.strip():
                out.append(BranchConfig(name=item.strip()))
            continue

        table = as_str_dict(item)
        name = get_str(table, "name") if table is not None else None
        if table is None or name is None:
            raise ValueError(f"invalid branch entry: {item!r}")
        out.append(
            BranchConfig(
                name=name,
                channel=get_str(table, "channel"),
                range=get_str(table, "range"),
            )
        )
    return tuple(out)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def find_config(root: Path) -> Path | None:
    """Return the config file for a repository root, if any.

    `.semrel.toml` wins over a `pyproject.toml` carrying `[tool.semrel]`.
    """
    dedicated = root / CONFIG_FILE_NAME
    if dedicated.is_file():
        return dedicated

    pyproject = root / PYPROJECT_FILE_NAME
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Ok):
            tool = get_table(parsed.value, "tool") or {}
            if get_table(tool, "semrel") is not None:
                return pyproject
    return None


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse release configuration from a TOML file.

    Args:
        path: `.semrel.toml` or a `pyproject.toml` with a `[tool.semrel]` table

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    data = result.value
    if path.name == PYPROJECT_FILE_NAME:
        tool = get_table(data, "tool") or {}
        data = get_table(tool, "semrel") or {}

    try:
        return Ok(ReleaseConfig.from_dict(data))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load the repository config, or defaults when there is no config file."""
    path = find_config(root)
    if path is None:
        return Ok(ReleaseConfig())
    return load_config(path)
