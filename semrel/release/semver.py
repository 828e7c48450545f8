from __future__ import annotations

import re
from dataclasses import dataclass

from semrel.release.context import LastRelease, ReleaseType

FIRST_RELEASE = "1.0.0"

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)
# Fragment used to build tag-matching regexes from a tag format.
SEMVER_PATTERN = r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?"


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base

    @property
    def sort_key(self) -> tuple[int, int, int, int, str]:
        # A prerelease sorts before the matching release.
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, self.prerelease or "")

    def bump(self, kind: ReleaseType) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(text: str) -> SemVer | None:
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))


def next_version(release_type: ReleaseType, last_release: LastRelease) -> str:
    """Version of the next release; 1.0.0 when nothing was released yet."""
    if not last_release or last_release.version is None:
        return FIRST_RELEASE
    current = parse_version(last_release.version)
    if current is None:
        raise ValueError(f"last release has an invalid version: {last_release.version}")
    return str(current.bump(release_type))
