"""Release tag model: ``stable-vX.Y.Z`` and ``beta-vX.Y.Z``."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "ReleaseTag",
    "TagFamily",
    "Version",
    "increment",
    "latest_tag",
    "parse_tag",
    "parse_version",
]

_TAG_RE = re.compile(r"^(stable|beta)-v(\d+)\.(\d+)\.(\d+)$")
_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)")


class TagFamily(Enum):
    """Release channel, identified by its tag prefix."""

    STABLE = "stable"
    BETA = "beta"

    @property
    def prefix(self) -> str:
        return f"{self.value}-v"

    @property
    def is_prerelease(self) -> bool:
        return self is TagFamily.BETA


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, position: int) -> Version:
        """Increment component ``position`` (1=major, 2=minor, 3=patch)."""
        return _from_parts(_bump_parts([self.major, self.minor, self.patch], position))


@dataclass(frozen=True, slots=True)
class ReleaseTag:
    family: TagFamily
    version: Version

    def __str__(self) -> str:
        return f"{self.family.prefix}{self.version}"

    def with_family(self, family: TagFamily) -> ReleaseTag:
        return ReleaseTag(family=family, version=self.version)

    def bump(self, position: int) -> ReleaseTag:
        return ReleaseTag(family=self.family, version=self.version.bump(position))


def _from_parts(parts: list[int]) -> Version:
    return Version(parts[0], parts[1], parts[2])


def _bump_parts(parts: list[int], position: int) -> list[int]:
    if not 1 <= position <= len(parts):
        raise ValueError(f"position must be between 1 and {len(parts)}, got {position}")
    out = list(parts)
    out[position - 1] += 1
    for i in range(position, len(out)):
        out[i] = 0
    return out


def parse_tag(tag: str) -> ReleaseTag | None:
    """Parse a release tag; anything outside the two families yields None."""
    m = _TAG_RE.match(tag.strip())
    if m is None:
        return None
    family = TagFamily(m.group(1))
    return ReleaseTag(family, Version(int(m.group(2)), int(m.group(3)), int(m.group(4))))


def parse_version(text: str) -> Version | None:
    """Find the first ``X.Y.Z`` triple in ``text``."""
    m = _VERSION_RE.search(text)
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def latest_tag(tags: Iterable[str], family: TagFamily) -> ReleaseTag | None:
    """Return the numerically highest tag of ``family``.

    Components compare as integers, so ``beta-v1.10.0`` beats ``beta-v1.9.0``.
    Strings that are not release tags, or belong to the other family, are
    ignored.
    """
    best: ReleaseTag | None = None
    for raw in tags:
        parsed = parse_tag(raw)
        if parsed is None or parsed.family is not family:
            continue
        if best is None or parsed.version > best.version:
            best = parsed
    return best


def _lenient_int(part: str) -> int:
    s = part.strip()
    return int(s) if s.isdigit() else 0


def increment(version: str, position: int) -> str:
    """Increment a dotted version string at ``position`` (1-based).

    Components after ``position`` are reset to 0. Unparseable components are
    read as 0 and the version is padded to at least three components, so
    ``increment("1.x", 3) == "1.0.1"``.

    This is the library helper for raw version strings; ``resolve`` works on
    parsed tags through ``Version.bump``, which shares the same bump rule.

    Raises:
        ValueError: ``position`` is outside the component range.
    """
    parts = [_lenient_int(p) for p in version.split(".")]
    while len(parts) < 3:
        parts.append(0)
    return ".".join(str(n) for n in _bump_parts(parts, position))
