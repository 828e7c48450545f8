from __future__ import annotations

import dataclasses

import pytest

from semrel.git.repository import Commit
from semrel.output.console import MockConsole
from semrel.release.context import NO_RELEASE, LastRelease, NextRelease, ReleaseContext

from ._fakes import make_options


def _context() -> ReleaseContext:
    return ReleaseContext(make_options(), MockConsole())


def _next() -> NextRelease:
    return NextRelease(type="patch", version="1.2.1", channel=None, git_head="h1", git_tag="v1.2.1")


def test_fresh_context_has_no_release() -> None:
    ctx = _context()

    assert ctx.last_release is NO_RELEASE
    assert not ctx.last_release
    assert ctx.commits == ()
    assert ctx.next_release is None


def test_last_release_is_set_once() -> None:
    ctx = _context()
    ctx.last_release = LastRelease(version="1.2.0", git_head="b", git_tag="v1.2.0")

    with pytest.raises(RuntimeError):
        ctx.last_release = NO_RELEASE

    assert ctx.last_release.version == "1.2.0"


def test_commits_are_set_once() -> None:
    ctx = _context()
    ctx.commits = [Commit(hash="c1", message="fix: x")]

    with pytest.raises(RuntimeError):
        ctx.commits = []

    assert isinstance(ctx.commits, tuple)


def test_next_release_is_decided_once_then_updated() -> None:
    ctx = _context()
    ctx.set_next_release(_next())

    with pytest.raises(RuntimeError):
        ctx.set_next_release(_next())

    updated = ctx.update_next_release(git_head="h2", notes="notes")
    assert updated.git_head == "h2"
    assert ctx.next_release == updated
    assert ctx.next_release.version == "1.2.1"


def test_update_without_next_release_fails() -> None:
    with pytest.raises(RuntimeError):
        _context().update_next_release(notes="x")


def test_plugin_input_is_a_frozen_snapshot() -> None:
    ctx = _context()
    ctx.set_next_release(_next())
    snapshot = ctx.plugin_input()

    ctx.update_next_release(notes="later")

    assert snapshot.next_release is not None
    assert snapshot.next_release.notes is None
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.commits = ()  # type: ignore[misc]


def test_plugin_input_overrides() -> None:
    ctx = _context()
    ctx.commits = [Commit(hash="c1", message="a"), Commit(hash="c2", message="b")]

    narrowed = ctx.plugin_input(commits=ctx.commits[:1])

    assert [c.hash for c in narrowed.commits] == ["c1"]
    assert len(ctx.plugin_input().commits) == 2


def test_last_release_truthiness() -> None:
    assert LastRelease(version="0.1.0")
    assert not LastRelease()
