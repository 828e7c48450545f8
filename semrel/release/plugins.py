"""Plugin pipeline executor.

Each extension point has zero or more registered steps. A phase runs its
steps in one of two modes:

- settle_all: every step runs whatever the others do; all failures are
  raised together as an AggregateFailure.
- run_sequence: steps run in order, each one optionally fed an input derived
  from the previous result; the first failure propagates immediately.

Usage:
    match PluginRegistry.from_modules(["my_plugins.npm"]):
        case Ok(registry):
            settle_all(registry.steps(ExtensionPoint.VERIFY_CONDITIONS), plugin_input)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass
from enum import StrEnum

from semrel.core.result import Err, Ok, Result
from semrel.release.context import NextRelease, PluginInput, ReleaseType
from semrel.release.errors import AggregateFailure
from semrel.release.failures import get_failure

__all__ = [
    "ExtensionPoint",
    "PluginHandler",
    "PluginLoadError",
    "PluginRegistry",
    "PluginStep",
    "highest_release_type",
    "join_notes",
    "merge_release",
    "run_sequence",
    "settle_all",
]


class ExtensionPoint(StrEnum):
    """Named phases plugins can hook into."""

    VERIFY_CONDITIONS = "verifyConditions"
    ANALYZE_COMMITS = "analyzeCommits"
    VERIFY_RELEASE = "verifyRelease"
    GENERATE_NOTES = "generateNotes"
    PREPARE = "prepare"
    PUBLISH = "publish"
    SUCCESS = "success"
    FAIL = "fail"

    @property
    def function_name(self) -> str:
        """Name of the module-level function implementing this point."""
        out: list[str] = []
        for ch in self.value:
            if ch.isupper():
                out.append("_")
            out.append(ch.lower())
        return "".join(out)


PluginHandler = Callable[[PluginInput], object]


@dataclass(frozen=True, slots=True)
class PluginStep:
    """One registered implementation of an extension point."""

    name: str
    point: ExtensionPoint
    handler: PluginHandler

    def __call__(self, plugin_input: PluginInput) -> object:
        return self.handler(plugin_input)


@dataclass(frozen=True, slots=True)
class PluginLoadError:
    module: str
    message: str


Transform = Callable[[object, PluginStep], object]
NextInput = Callable[[PluginInput, object], PluginInput]


class PluginRegistry:
    """Extension point -> ordered steps, fixed for the whole run."""

    def __init__(self, steps: Iterable[PluginStep] = ()) -> None:
        grouped: dict[ExtensionPoint, list[PluginStep]] = {}
        for step in steps:
            grouped.setdefault(step.point, []).append(step)
        self._steps: dict[ExtensionPoint, tuple[PluginStep, ...]] = {
            point: tuple(items) for point, items in grouped.items()
        }

    def steps(self, point: ExtensionPoint) -> tuple[PluginStep, ...]:
        return self._steps.get(point, ())

    def __len__(self) -> int:
        return sum(len(items) for items in self._steps.values())

    @classmethod
    def from_modules(cls, names: Sequence[str]) -> Result[PluginRegistry, PluginLoadError]:
        """Register the extension point functions found in each module.

        A module implements a point by defining a function named after it,
        e.g. `analyze_commits(plugin_input)`.
        """
        steps: list[PluginStep] = []
        for name in names:
            try:
                module = importlib.import_module(name)
            except ImportError as e:
                return Err(
                    PluginLoadError(module=name, message=f"cannot import plugin {name}: {e}")
                )

            found = False
            for point in ExtensionPoint:
                handler = getattr(module, point.function_name, None)
                if callable(handler):
                    steps.append(PluginStep(name=name, point=point, handler=handler))
                    found = True
            if not found:
                return Err(
                    PluginLoadError(
                        module=name, message=f"plugin {name} defines no extension point"
                    )
                )
        return Ok(cls(steps))


def settle_all(steps: Sequence[PluginStep], plugin_input: PluginInput) -> list[object]:
    """Run every step with the same input and collect all failures.

    Raises:
        AggregateFailure: if at least one step raised; holds every failure.
    """
    results: list[object] = []
    failures: list[Exception] = []
    for step in steps:
        try:
            results.append(step(plugin_input))
        except Exception as e:
            failures.append(e)

    if failures:
        raise AggregateFailure(f"{steps[0].point} failed", failures)
    return results


def run_sequence(
    steps: Sequence[PluginStep],
    plugin_input: PluginInput,
    *,
    next_input: NextInput | None = None,
    transform: Transform | None = None,
) -> list[object]:
    """Run steps in order and return every (transformed) result.

    After each step, `next_input(current_input, raw_result)` computes the
    input of what runs next; the default reuses the input unchanged. The
    hook also runs after the last step so a caller can observe its effects.
    """
    results: list[object] = []
    current = plugin_input
    for step in steps:
        raw = step(current)
        results.append(transform(raw, step) if transform else raw)
        if next_input is not None:
            current = next_input(current, raw)
    return results


def merge_release(result: object, next_release: NextRelease, step: PluginStep) -> dict[str, object]:
    """Decorate a publish result.

    Precedence, lowest first: fields returned by the plugin, then the next
    release identity, then the step identity.
    """
    merged: dict[str, object] = dict(result) if isinstance(result, Mapping) else {}
    merged.update(asdict(next_release))
    merged["plugin_name"] = step.name
    return merged


_RELEASE_TYPE_RANK: dict[str, int] = {"patch": 1, "minor": 2, "major": 3}


def highest_release_type(results: Iterable[object]) -> ReleaseType | None:
    """Reduce analyzeCommits results to the most significant release type."""
    best: str | None = None
    for result in results:
        if not result:
            continue
        if not isinstance(result, str) or result not in _RELEASE_TYPE_RANK:
            raise get_failure("EINVALIDRELEASETYPE", release_type=result)
        if best is None or _RELEASE_TYPE_RANK[result] > _RELEASE_TYPE_RANK[best]:
            best = result
    return best  # type: ignore[return-value]


def join_notes(results: Iterable[object]) -> str:
    """Reduce generateNotes results to one document."""
    parts = [str(r).strip() for r in results if r and str(r).strip()]
    return "\n\n".join(parts)
