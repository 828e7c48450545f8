"""Git operations module.

Usage:
    from semrel.git import Repository

    repo = Repository(Path("."))
    tags = repo.tags()
"""

from semrel.git.repository import Commit, GitError, Repository

__all__ = [
    "Commit",
    "GitError",
    "Repository",
]
