"""Exit codes for the semrel CLI.

These values are used as process exit codes and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (a release was published, or no release was needed)
    - 1: User error (bad flags, unreadable plugin module)
    - 2: Environment error (invalid config file, not a git repository)
    - 3: Release error (a classified failure aborted the run)
    - 4: Internal error (an unexpected exception aborted the run)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RELEASE_ERROR = 3
    INTERNAL_ERROR = 4

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        """Check if this code indicates success."""
        return self == ErrorCode.OK
