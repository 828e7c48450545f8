"""CI environment detection.

Reads the well-known environment variables of common CI providers to tell
whether semrel runs under CI, on which branch, and for a pull request.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto

__all__ = ["CiProvider", "CiEnvironment", "detect_ci"]


class CiProvider(Enum):
    """Known CI providers."""

    GITHUB_ACTIONS = auto()
    GITLAB = auto()
    TRAVIS = auto()
    CIRCLECI = auto()
    GENERIC = auto()
    NONE = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class CiEnvironment:
    """Detected CI state.

    Attributes:
        provider: Which provider was recognized.
        is_ci: True when running under any CI.
        branch: Branch being built (None if the provider does not expose it).
        is_pr: True when the build was triggered by a pull/merge request.
    """

    provider: CiProvider
    is_ci: bool
    branch: str | None = None
    is_pr: bool = False


_NOT_CI = CiEnvironment(provider=CiProvider.NONE, is_ci=False)


def _strip_ref(ref: str | None) -> str | None:
    if not ref:
        return None
    for prefix in ("refs/heads/", "refs/tags/"):
        if ref.startswith(prefix):
            return ref[len(prefix) :]
    return ref


def _github(env: Mapping[str, str]) -> CiEnvironment | None:
    if env.get("GITHUB_ACTIONS") != "true":
        return None
    is_pr = env.get("GITHUB_EVENT_NAME") in {"pull_request", "pull_request_target"}
    # On PR events GITHUB_REF points at the merge ref; the base branch is what matters.
    branch = env.get("GITHUB_BASE_REF") if is_pr else _strip_ref(env.get("GITHUB_REF"))
    return CiEnvironment(
        provider=CiProvider.GITHUB_ACTIONS, is_ci=True, branch=branch or None, is_pr=is_pr
    )


def _gitlab(env: Mapping[str, str]) -> CiEnvironment | None:
    if env.get("GITLAB_CI") != "true":
        return None
    is_pr = bool(env.get("CI_MERGE_REQUEST_ID"))
    branch = (
        env.get("CI_MERGE_REQUEST_TARGET_BRANCH_NAME")
        if is_pr
        else env.get("CI_COMMIT_REF_NAME")
    )
    return CiEnvironment(provider=CiProvider.GITLAB, is_ci=True, branch=branch or None, is_pr=is_pr)


def _travis(env: Mapping[str, str]) -> CiEnvironment | None:
    if env.get("TRAVIS") != "true":
        return None
    pr = env.get("TRAVIS_PULL_REQUEST", "false")
    return CiEnvironment(
        provider=CiProvider.TRAVIS,
        is_ci=True,
        branch=env.get("TRAVIS_BRANCH") or None,
        is_pr=pr not in {"", "false"},
    )


def _circleci(env: Mapping[str, str]) -> CiEnvironment | None:
    if env.get("CIRCLECI") != "true":
        return None
    return CiEnvironment(
        provider=CiProvider.CIRCLECI,
        is_ci=True,
        branch=env.get("CIRCLE_BRANCH") or None,
        is_pr=bool(env.get("CIRCLE_PULL_REQUEST")),
    )


_DETECTORS: tuple[Callable[[Mapping[str, str]], CiEnvironment | None], ...] = (
    _github,
    _gitlab,
    _travis,
    _circleci,
)


def detect_ci(env: Mapping[str, str] | None = None) -> CiEnvironment:
    """Detect the CI environment from environment variables.

    Args:
        env: Environment to inspect (defaults to os.environ).
    """
    env = os.environ if env is None else env
    for detector in _DETECTORS:
        found = detector(env)
        if found is not None:
            return found

    if env.get("CI", "").lower() in {"true", "1"}:
        return CiEnvironment(provider=CiProvider.GENERIC, is_ci=True)
    return _NOT_CI
