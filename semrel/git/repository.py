"""Git repository abstraction.

The Repository class wraps the git command line for the handful of operations
a release run needs. All operations that can fail return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.head():
        case Ok(sha):
            print(f"HEAD: {sha}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.platform.process import ProcessError
from semrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone", "ls-remote"})

# Unit/record separators keep multi-line commit bodies unambiguous.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%aI", "%B"]) + _RECORD_SEP

__all__ = [
    "Commit",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit as read from `git log`."""

    hash: str
    message: str
    author: str | None = None
    date: str | None = None

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def subject(self) -> str:
        return self.message.splitlines()[0] if self.message else ""


class Repository:
    """Git operations on a single repository.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if the path is inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def is_shallow(self) -> bool:
        result = self._run(["rev-parse", "--is-shallow-repository"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def unshallow(self) -> Result[None, GitError]:
        """Fetch full history and all tags.

        A complete (non-shallow) clone only fetches tags.
        """
        args = ["fetch", "--unshallow", "--tags"] if self.is_shallow() else ["fetch", "--tags"]
        return self._simple(args, fallback="fetch failed")

    def verify_auth(self, repository_url: str, branch: str = "HEAD") -> bool:
        """Check push permission with a dry-run push of HEAD to the branch."""
        result = self._run(
            ["push", "--dry-run", "--no-verify", repository_url, f"HEAD:{branch}"]
        )
        return isinstance(result, Ok)

    def head(self) -> Result[str, GitError]:
        """Return the sha of HEAD."""
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse HEAD", e, "cannot read HEAD"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def remote_url(self, remote: str = "origin") -> str | None:
        result = self._run(["remote", "get-url", remote])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def tags(self) -> Result[list[str], GitError]:
        """List tags reachable from HEAD."""
        result = self._run(["tag", "--merged", "HEAD"])
        match result:
            case Err(e):
                return Err(_git_error("tag --merged", e, "cannot list tags"))
            case Ok(stdout):
                return Ok([t.strip() for t in stdout.splitlines() if t.strip()])

    def tag_head(self, tag: str) -> Result[str, GitError]:
        """Return the commit sha a tag points to."""
        result = self._run(["rev-list", "-1", tag])
        match result:
            case Err(e):
                return Err(_git_error(f"rev-list {tag}", e, "unknown tag"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def commits_since(self, ref: str | None) -> Result[list[Commit], GitError]:
        """Commits reachable from HEAD but not from `ref` (all commits if None)."""
        rev = f"{ref}..HEAD" if ref else "HEAD"
        result = self._run(["log", f"--format={_LOG_FORMAT}", rev])
        match result:
            case Err(e):
                return Err(_git_error("log", e, "cannot read commits"))
            case Ok(stdout):
                return Ok(_parse_log(stdout))

    def tag(self, name: str, ref: str = "HEAD") -> Result[None, GitError]:
        return self._simple(["tag", name, ref], fallback=f"cannot create tag {name}")

    def push(self, repository_url: str, branch: str) -> Result[None, GitError]:
        """Push HEAD to the branch, then push tags."""
        pushed = self._simple(
            ["push", repository_url, f"HEAD:{branch}"], fallback="push failed"
        )
        if isinstance(pushed, Err):
            return pushed
        return self._simple(["push", "--tags", repository_url], fallback="push --tags failed")

    def _simple(self, args: list[str], *, fallback: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error(" ".join(args[:2]), result.error, fallback))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


def _parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FIELD_SEP, 3)
        if len(parts) != 4:
            continue
        sha, author, date, body = parts
        commits.append(
            Commit(
                hash=sha.strip(),
                message=body.strip(),
                author=author or None,
                date=date or None,
            )
        )
    return commits
