from __future__ import annotations

import sys
import types
from dataclasses import replace

import pytest

from semrel.core.result import Err, Ok
from semrel.output.console import MockConsole
from semrel.release.context import NextRelease, PluginInput
from semrel.release.errors import AggregateFailure, ReleaseFailure
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

from ._fakes import make_options


def _input() -> PluginInput:
    return PluginInput(options=make_options(), console=MockConsole())


def _step(name: str, handler, point: ExtensionPoint = ExtensionPoint.VERIFY_CONDITIONS) -> PluginStep:  # type: ignore[no-untyped-def]
    return PluginStep(name=name, point=point, handler=handler)


def test_function_names_are_snake_case() -> None:
    assert ExtensionPoint.VERIFY_CONDITIONS.function_name == "verify_conditions"
    assert ExtensionPoint.ANALYZE_COMMITS.function_name == "analyze_commits"
    assert ExtensionPoint.FAIL.function_name == "fail"


def test_settle_all_runs_every_step_and_collects_failures() -> None:
    ran: list[str] = []
    first = ReleaseFailure("EONE", "one")
    second = ValueError("two")

    def failing(name: str, error: Exception):
        def handler(_: PluginInput) -> None:
            ran.append(name)
            raise error

        return handler

    steps = (
        _step("a", failing("a", first)),
        _step("b", lambda _: ran.append("b")),
        _step("c", failing("c", second)),
    )

    with pytest.raises(AggregateFailure) as exc:
        settle_all(steps, _input())

    assert ran == ["a", "b", "c"]
    assert exc.value.exceptions == (first, second)
    assert "verifyConditions" in str(exc.value)


def test_settle_all_returns_results_in_order() -> None:
    steps = (_step("a", lambda _: 1), _step("b", lambda _: 2))

    assert settle_all(steps, _input()) == [1, 2]
    assert settle_all((), _input()) == []


def test_run_sequence_feeds_each_result_forward() -> None:
    seen: list[int] = []

    def record(inp: PluginInput) -> int:
        seen.append(len(inp.releases))
        return len(inp.releases) + 1

    def next_input(current: PluginInput, result: object) -> PluginInput:
        return replace(current, releases=(*current.releases, result))

    steps = (_step("a", record), _step("b", record), _step("c", record))

    results = run_sequence(steps, _input(), next_input=next_input)

    assert seen == [0, 1, 2]
    assert results == [1, 2, 3]


def test_run_sequence_calls_next_input_after_last_step() -> None:
    calls: list[object] = []

    def next_input(current: PluginInput, result: object) -> PluginInput:
        calls.append(result)
        return current

    run_sequence((_step("a", lambda _: "x"), _step("b", lambda _: "y")), _input(), next_input=next_input)

    assert calls == ["x", "y"]


def test_run_sequence_stops_at_first_failure() -> None:
    ran: list[str] = []
    boom = ReleaseFailure("EBOOM", "boom")

    def fail(_: PluginInput) -> None:
        ran.append("a")
        raise boom

    steps = (_step("a", fail), _step("b", lambda _: ran.append("b")))

    with pytest.raises(ReleaseFailure) as exc:
        run_sequence(steps, _input())

    assert exc.value is boom
    assert ran == ["a"]


def test_merge_release_precedence() -> None:
    next_release = NextRelease(
        type="minor", version="1.3.0", channel=None, git_head="abc", git_tag="v1.3.0", notes="n"
    )
    step = _step("github", lambda _: None, ExtensionPoint.PUBLISH)

    merged = merge_release({"url": "u", "version": "9.9.9", "plugin_name": "x"}, next_release, step)

    assert merged["url"] == "u"
    assert merged["version"] == "1.3.0"
    assert merged["plugin_name"] == "github"
    assert merged["notes"] == "n"


def test_merge_release_ignores_non_mapping_results() -> None:
    next_release = NextRelease(type="patch", version="1.0.1", channel="next", git_head="h", git_tag="v1.0.1")

    merged = merge_release("published", next_release, _step("npm", lambda _: None))

    assert merged["channel"] == "next"
    assert merged["plugin_name"] == "npm"
    assert "published" not in merged.values()


@pytest.mark.parametrize(
    ("results", "expected"),
    [
        ([], None),
        ([None, ""], None),
        (["patch"], "patch"),
        (["patch", None, "minor"], "minor"),
        (["major", "patch"], "major"),
    ],
)
def test_highest_release_type(results: list[object], expected: str | None) -> None:
    assert highest_release_type(results) == expected


def test_highest_release_type_rejects_unknown_type() -> None:
    with pytest.raises(ReleaseFailure) as exc:
        highest_release_type(["minor", "huge"])

    assert exc.value.code == "EINVALIDRELEASETYPE"
    assert "huge" in (exc.value.details or "")


def test_join_notes_skips_empty_results() -> None:
    assert join_notes(["## Features\n", None, "  ", "## Fixes"]) == "## Features\n\n## Fixes"
    assert join_notes([]) == ""


def test_registry_groups_steps_by_point_in_order() -> None:
    a = _step("a", lambda _: None, ExtensionPoint.PUBLISH)
    b = _step("b", lambda _: None, ExtensionPoint.VERIFY_CONDITIONS)
    c = _step("c", lambda _: None, ExtensionPoint.PUBLISH)

    registry = PluginRegistry([a, b, c])

    assert registry.steps(ExtensionPoint.PUBLISH) == (a, c)
    assert registry.steps(ExtensionPoint.VERIFY_CONDITIONS) == (b,)
    assert registry.steps(ExtensionPoint.FAIL) == ()
    assert len(registry) == 3


def test_registry_from_modules(monkeypatch: pytest.MonkeyPatch) -> None:
    module = types.ModuleType("semrel_test_plugin")
    module.analyze_commits = lambda inp: "patch"  # type: ignore[attr-defined]
    module.publish = lambda inp: None  # type: ignore[attr-defined]
    module.helper = "not a handler"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "semrel_test_plugin", module)

    result = PluginRegistry.from_modules(["semrel_test_plugin"])

    assert isinstance(result, Ok)
    registry = result.value
    assert len(registry) == 2
    (step,) = registry.steps(ExtensionPoint.ANALYZE_COMMITS)
    assert step.name == "semrel_test_plugin"
    assert step(_input()) == "patch"


def test_registry_from_modules_reports_missing_module() -> None:
    result = PluginRegistry.from_modules(["semrel_no_such_plugin_module"])

    assert isinstance(result, Err)
    assert result.error.module == "semrel_no_such_plugin_module"
    assert "cannot import" in result.error.message


def test_registry_from_modules_rejects_module_without_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "semrel_empty_plugin", types.ModuleType("semrel_empty_plugin"))

    result = PluginRegistry.from_modules(["semrel_empty_plugin"])

    assert isinstance(result, Err)
    assert "defines no extension point" in result.error.message
