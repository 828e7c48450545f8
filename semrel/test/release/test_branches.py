from __future__ import annotations

import pytest

from semrel.core.config import BranchConfig
from semrel.release.branches import find_branch, is_maintenance, resolve_branches
from semrel.release.context import BranchSpec
from semrel.release.errors import ReleaseFailure

FMT = "v${version}"


@pytest.mark.parametrize(
    ("name", "expected"),
    [("1.x", True), ("1.2.x", True), ("0.x", True), ("main", False), ("01.x", False), ("1.x.x", False)],
)
def test_is_maintenance(name: str, expected: bool) -> None:
    assert is_maintenance(name) is expected


def test_first_release_branch_uses_default_channel() -> None:
    branches = resolve_branches(
        ["v1.0.0", "v1.4.2", "v2.0.0-beta.1"],
        [BranchConfig(name="main"), BranchConfig(name="next")],
        FMT,
    )

    assert branches == [
        BranchSpec(name="main", channel=None, range=">=1.4.2"),
        BranchSpec(name="next", channel="next", range=">=1.4.2"),
    ]


def test_configured_channel_and_range_win() -> None:
    (main, beta) = resolve_branches(
        [],
        [BranchConfig(name="main", channel="stable"), BranchConfig(name="beta", channel="pre", range=">=2.0.0")],
        FMT,
    )

    assert main.channel == "stable"
    assert main.range == ">=1.0.0"
    assert beta.channel == "pre"
    assert beta.range == ">=2.0.0"


def test_maintenance_branches_get_bounded_ranges() -> None:
    branches = resolve_branches(
        ["v2.1.0"],
        [BranchConfig(name="1.x"), BranchConfig(name="1.5.x"), BranchConfig(name="main")],
        FMT,
    )

    by_name = {b.name: b for b in branches}
    assert by_name["1.x"].range == ">=1.0.0 <2.0.0"
    assert by_name["1.x"].channel == "1.x"
    assert by_name["1.5.x"].range == ">=1.5.0 <1.6.0"
    assert by_name["main"].channel is None
    assert [b.name for b in branches] == ["1.x", "1.5.x", "main"]


def test_duplicate_branches_fail() -> None:
    with pytest.raises(ReleaseFailure) as exc:
        resolve_branches([], [BranchConfig("main"), BranchConfig("next"), BranchConfig("main")], FMT)

    assert exc.value.code == "EDUPLICATEBRANCHES"
    assert "`main`" in (exc.value.details or "")


def test_maintenance_only_configuration_fails() -> None:
    with pytest.raises(ReleaseFailure) as exc:
        resolve_branches([], [BranchConfig("1.x")], FMT)

    assert exc.value.code == "ENORELEASEBRANCHES"


def test_resolution_is_deterministic() -> None:
    configured = [BranchConfig("main"), BranchConfig("next"), BranchConfig("1.x")]
    tags = ["v1.0.0", "v1.1.0"]

    assert resolve_branches(tags, configured, FMT) == resolve_branches(tags, configured, FMT)


def test_find_branch() -> None:
    branches = [BranchSpec("main"), BranchSpec("next", channel="next")]

    assert find_branch(branches, "next") == branches[1]
    assert find_branch(branches, "feature/x") is None
    assert find_branch(branches, None) is None
