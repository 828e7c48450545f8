"""Catalogue of classified failures raised by semrel itself."""

from __future__ import annotations

from dataclasses import dataclass

from semrel.release.errors import ReleaseFailure

__all__ = ["FAILURES", "get_failure"]


@dataclass(frozen=True, slots=True)
class _Template:
    message: str
    details: str


# Templates use str.format; literal braces are doubled.
FAILURES: dict[str, _Template] = {
    "ENOGITREPO": _Template(
        message="Not running from a git repository.",
        details=(
            "semrel must run from a git repository.\n\n"
            "The current directory is `{cwd}`. Make sure it is the root of a clone."
        ),
    ),
    "ENOREPOURL": _Template(
        message="The `repository_url` option is required.",
        details=(
            "The repository URL could not be determined from the config or from the "
            "`origin` remote.\n\nSet `repository_url` in `.semrel.toml` or pass "
            "`--repository-url`."
        ),
    ),
    "ETAGNOVERSION": _Template(
        message="Invalid `tag_format` option.",
        details=(
            "The `tag_format` option must contain the variable `${{version}}` exactly once.\n\n"
            "Your configuration for `tag_format` is `{tag_format}`."
        ),
    ),
    "EINVALIDTAGFORMAT": _Template(
        message="Invalid `tag_format` option.",
        details=(
            "The `tag_format` option must produce a valid git reference name.\n\n"
            "Your configuration for `tag_format` is `{tag_format}`."
        ),
    ),
    "EGITNOPERMISSION": _Template(
        message="Cannot push to the Git repository.",
        details=(
            "semrel cannot push the version tag to the branch `{branch}` on the remote "
            "repository with URL `{repository_url}`.\n\n"
            "Make sure the credentials used by the CI job allow pushing to this branch."
        ),
    ),
    "EDUPLICATEBRANCHES": _Template(
        message="The `branches` option contains duplicate branches.",
        details="Each branch may be configured once. Duplicates: {duplicates}.",
    ),
    "ENORELEASEBRANCHES": _Template(
        message="The `branches` option must define at least one release branch.",
        details="Configure at least one branch, for example `branches = [\"main\"]`.",
    ),
    "EGITFAILED": _Template(
        message="Git command `{command}` failed.",
        details="```\n{output}\n```",
    ),
    "EINVALIDRELEASETYPE": _Template(
        message="Invalid release type returned by analyzeCommits.",
        details="Got `{release_type}`; expected one of `major`, `minor` or `patch`.",
    ),
}


def get_failure(code: str, **context: object) -> ReleaseFailure:
    """Build the ReleaseFailure for a catalogued code.

    Raises:
        KeyError: if the code is unknown or a template field is missing.
    """
    template = FAILURES[code]
    return ReleaseFailure(
        code=code,
        message=template.message.format(**context),
        details=template.details.format(**context),
    )
