"""Queue entry model and wait-time formatting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from relq.core.structured import StrDict, get_str

__all__ = [
    "ClearOutcome",
    "EntryStatus",
    "QueueEntry",
    "QueuePosition",
    "QueueStatus",
    "estimate_wait",
    "format_wait",
]

EntryStatus = Literal["pending", "processed"]

Timestamp = int | str


@dataclass(frozen=True, slots=True)
class QueueEntry:
    """One pending release request.

    Attributes:
        sha: Commit identifier; unique within a queue file.
        branch: Branch the release was requested for.
        timestamp: RFC3339 string, or epoch seconds when read from older files.
        status: Always ``pending`` on disk; clearing removes the entry.
        estimated_time: Human-readable wait derived from the entry's position.
    """

    sha: str
    branch: str
    timestamp: Timestamp
    status: str = "pending"
    estimated_time: str = ""

    def to_dict(self) -> StrDict:
        return {
            "sha": self.sha,
            "branch": self.branch,
            "timestamp": self.timestamp,
            "status": self.status,
            "estimated_time": self.estimated_time,
        }

    @classmethod
    def from_dict(cls, data: StrDict) -> QueueEntry | None:
        """Build an entry from a decoded JSON object.

        ``commit``/``date`` are accepted as aliases of ``sha``/``timestamp``.
        Returns None when no commit identifier is present.
        """
        sha = get_str(data, "sha") or get_str(data, "commit")
        if sha is None:
            return None

        raw_ts = data.get("timestamp", data.get("date"))
        timestamp: Timestamp
        if isinstance(raw_ts, bool):
            timestamp = ""
        elif isinstance(raw_ts, (int, str)):
            timestamp = raw_ts
        else:
            timestamp = ""

        estimated = data.get("estimated_time")
        return cls(
            sha=sha,
            branch=get_str(data, "branch") or "",
            timestamp=timestamp,
            status=get_str(data, "status") or "pending",
            estimated_time=estimated if isinstance(estimated, str) else "",
        )


@dataclass(frozen=True, slots=True)
class QueuePosition:
    position: int
    estimated_wait: str


@dataclass(frozen=True, slots=True)
class ClearOutcome:
    found: bool
    removed: int
    remaining: int


@dataclass(frozen=True, slots=True)
class QueueStatus:
    count: int
    oldest_timestamp: str


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def format_wait(minutes: int) -> str:
    """Format a wait in minutes.

    >>> format_wait(0)
    'Next in queue'
    >>> format_wait(45)
    '45 minutes'
    >>> format_wait(75)
    '1 hour 15 minutes'
    """
    if minutes <= 0:
        return "Next in queue"
    if minutes < 60:
        return _plural(minutes, "minute")

    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')} {_plural(rest, 'minute')}"


def estimate_wait(position: int, minutes_per_release: int) -> str:
    """Wait for the entry at 1-based ``position``."""
    return format_wait((position - 1) * minutes_per_release)
