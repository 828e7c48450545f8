"""Tests for semrel.platform.ci module."""

from __future__ import annotations

from semrel.platform.ci import CiProvider, detect_ci


class TestDetectCi:
    """Test CI provider detection from environment variables."""

    def test_not_ci(self) -> None:
        env = detect_ci({})
        assert env.provider == CiProvider.NONE
        assert env.is_ci is False
        assert env.branch is None

    def test_github_push(self) -> None:
        env = detect_ci(
            {"GITHUB_ACTIONS": "true", "GITHUB_EVENT_NAME": "push", "GITHUB_REF": "refs/heads/main"}
        )
        assert env.provider == CiProvider.GITHUB_ACTIONS
        assert env.is_ci is True
        assert env.branch == "main"
        assert env.is_pr is False

    def test_github_pull_request_uses_base_branch(self) -> None:
        env = detect_ci(
            {
                "GITHUB_ACTIONS": "true",
                "GITHUB_EVENT_NAME": "pull_request",
                "GITHUB_REF": "refs/pull/7/merge",
                "GITHUB_BASE_REF": "main",
            }
        )
        assert env.is_pr is True
        assert env.branch == "main"

    def test_gitlab_merge_request(self) -> None:
        env = detect_ci(
            {
                "GITLAB_CI": "true",
                "CI_MERGE_REQUEST_ID": "12",
                "CI_MERGE_REQUEST_TARGET_BRANCH_NAME": "next",
                "CI_COMMIT_REF_NAME": "feature",
            }
        )
        assert env.provider == CiProvider.GITLAB
        assert env.is_pr is True
        assert env.branch == "next"

    def test_travis_branch_build(self) -> None:
        env = detect_ci({"TRAVIS": "true", "TRAVIS_BRANCH": "main", "TRAVIS_PULL_REQUEST": "false"})
        assert env.provider == CiProvider.TRAVIS
        assert env.is_pr is False
        assert env.branch == "main"

    def test_travis_pull_request(self) -> None:
        env = detect_ci({"TRAVIS": "true", "TRAVIS_BRANCH": "main", "TRAVIS_PULL_REQUEST": "42"})
        assert env.is_pr is True

    def test_circleci(self) -> None:
        env = detect_ci({"CIRCLECI": "true", "CIRCLE_BRANCH": "1.x"})
        assert env.provider == CiProvider.CIRCLECI
        assert env.branch == "1.x"
        assert env.is_pr is False

    def test_generic_ci(self) -> None:
        env = detect_ci({"CI": "1"})
        assert env.provider == CiProvider.GENERIC
        assert env.is_ci is True
        assert env.branch is None

    def test_provider_str(self) -> None:
        assert str(CiProvider.GITHUB_ACTIONS) == "github-actions"
