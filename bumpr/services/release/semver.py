from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from bumpr.core.result import Err, Ok, Result
from bumpr.services.release.errors import ReleaseError


BumpKind = Literal["major", "minor", "patch"]

BUMP_KINDS: tuple[BumpKind, ...] = ("major", "minor", "patch")

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def to_tag(self) -> str:
        return f"v{self}"

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _key(self) -> tuple[int, int, int, int, str]:
        # A pre-release sorts before the release it leads up to; build metadata is ignored.
        return (*self.core, 0 if self.prerelease else 1, self.prerelease or "")

    def __lt__(self, other: SemVer) -> bool:
        return self._key() < other._key()

    def __le__(self, other: SemVer) -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: SemVer) -> bool:
        return self._key() > other._key()

    def __ge__(self, other: SemVer) -> bool:
        return self._key() >= other._key()

    def bump(self, kind: BumpKind) -> SemVer:
        """Next release for ``kind``.

        A pre-release that already leads up to the requested release is
        promoted to it (``1.2.4-beta`` patch -> ``1.2.4``, ``1.3.0-rc.1``
        minor -> ``1.3.0``) instead of skipping that version.
        """
        if self.prerelease:
            release = SemVer(self.major, self.minor, self.patch)
            match kind:
                case "patch":
                    return release
                case "minor" if self.patch == 0:
                    return release
                case "major" if self.minor == 0 and self.patch == 0:
                    return release
                case _:
                    pass

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
    """Parse ``1.2.3`` or ``v1.2.3`` (with optional pre-release/build parts)."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4), m.group(5))


def parse_bump_kind(text: str) -> Result[BumpKind, ReleaseError]:
    value = text.strip().lower()
    for kind in BUMP_KINDS:
        if value == kind:
            return Ok(kind)
    return Err(
        ReleaseError(
            kind="validation",
            message=f"{text} is not valid, must be one of the following: {', '.join(BUMP_KINDS)}",
        )
    )


def resolve_next_version(current: str, kind: str) -> Result[str, ReleaseError]:
    """Return the version that follows ``current`` for the given bump kind.

    The bump kind is validated first so a bad argument is reported even when
    the current version is also broken.
    """
    bump = parse_bump_kind(kind)
    if isinstance(bump, Err):
        return bump

    parsed = parse_version(current)
    if parsed is None:
        return Err(
            ReleaseError(
                kind="validation",
                message=f"current version is not a semantic version: {current!r}",
            )
        )
    return Ok(str(parsed.bump(bump.value)))
