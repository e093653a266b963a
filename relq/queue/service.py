"""Release queue: ordered, deduplicated, persisted release requests.

Positions are 1-based and counted per branch in insertion order, so a shared
queue file holding both ``beta`` and ``main`` requests gives each branch its
own sequence. Each mutation is a load/modify/save cycle under the queue's
lock file; two CI runs touching the same queue serialize instead of
overwriting each other.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from relq.core.config import Config, queue_path
from relq.core.result import Err, Ok, Result
from relq.output.console import ConsoleProtocol
from relq.queue.errors import QueueError
from relq.queue.model import (
    ClearOutcome,
    QueueEntry,
    QueuePosition,
    QueueStatus,
    estimate_wait,
)
from relq.queue.store import QueueStore, lock_error

T = TypeVar("T")

__all__ = ["ReleaseQueue", "with_estimates"]

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _positions(entries: list[QueueEntry]) -> list[int]:
    seen: dict[str, int] = {}
    out: list[int] = []
    for entry in entries:
        seen[entry.branch] = seen.get(entry.branch, 0) + 1
        out.append(seen[entry.branch])
    return out


def with_estimates(entries: list[QueueEntry], minutes_per_release: int) -> list[QueueEntry]:
    """Return ``entries`` with ``estimated_time`` recomputed from positions."""
    return [
        replace(entry, estimated_time=estimate_wait(pos, minutes_per_release))
        for entry, pos in zip(entries, _positions(entries), strict=True)
    ]


def _index_of(entries: list[QueueEntry], sha: str, branch: str | None = None) -> int | None:
    for i, entry in enumerate(entries):
        if entry.sha == sha and (branch is None or entry.branch == branch):
            return i
    return None


class ReleaseQueue:
    """Pending releases stored in one queue file."""

    def __init__(
        self,
        path: Path,
        *,
        console: ConsoleProtocol,
        minutes_per_release: int = 15,
        lock_timeout: float = 10.0,
        stale_lock_seconds: float = 300.0,
        clock: Clock | None = None,
    ) -> None:
        self.path = path
        self.minutes_per_release = minutes_per_release
        self._console = console
        self._clock = clock or _utc_now
        self._store = QueueStore(
            path,
            console=console,
            lock_timeout=lock_timeout,
            stale_lock_seconds=stale_lock_seconds,
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        branch: str,
        root: Path,
        console: ConsoleProtocol,
    ) -> ReleaseQueue:
        return cls(
            queue_path(config, branch, root=root),
            console=console,
            minutes_per_release=config.queue.minutes_per_release,
            lock_timeout=config.queue.lock_timeout,
            stale_lock_seconds=config.queue.stale_lock_seconds,
        )

    def load(self) -> Result[list[QueueEntry], QueueError]:
        return self._store.load()

    def save(self, entries: list[QueueEntry]) -> Result[None, QueueError]:
        return self._store.save(entries)

    def _mutate(
        self,
        change: Callable[[list[QueueEntry]], tuple[list[QueueEntry] | None, T]],
    ) -> Result[T, QueueError]:
        """Run ``change`` on the current entries under the lock.

        ``change`` returns the new entry list (None to skip the write) and a
        value handed back to the caller.
        """
        try:
            with self._store.locked():
                loaded = self._store.load()
                if isinstance(loaded, Err):
                    return loaded
                updated, value = change(loaded.value)
                if updated is not None:
                    saved = self._store.save(updated)
                    if isinstance(saved, Err):
                        return saved
                return Ok(value)
        except OSError as e:
            return Err(lock_error(e, self.path))

    def enqueue(self, sha: str, branch: str) -> Result[QueuePosition, QueueError]:
        """Add ``sha`` to the queue, or refresh its timestamp if present.

        Branch validation belongs to the caller; any branch string is stored.
        """
        timestamp = _rfc3339(self._clock())

        def change(entries: list[QueueEntry]) -> tuple[list[QueueEntry], QueuePosition]:
            index = _index_of(entries, sha)
            if index is not None:
                self._console.info(f"commit {sha} already queued, refreshing timestamp")
                entries[index] = replace(entries[index], timestamp=timestamp)
            else:
                entries.append(QueueEntry(sha=sha, branch=branch, timestamp=timestamp))
                index = len(entries) - 1

            updated = with_estimates(entries, self.minutes_per_release)
            position = _positions(updated)[index]
            entry = updated[index]
            self._console.info(
                f"commit {sha} queued for {entry.branch} at position {position} "
                f"({entry.estimated_time})"
            )
            return updated, QueuePosition(position=position, estimated_wait=entry.estimated_time)

        return self._mutate(change)

    def clear_up_to(
        self, sha: str, branch: str | None = None
    ) -> Result[ClearOutcome, QueueError]:
        """Drop ``sha`` and every older entry of its branch.

        With ``branch``, only entries of that branch are matched and counted,
        for queue files shared between branches. An unknown ``sha`` leaves the
        file untouched and is reported as a warning, not an error.
        """

        def in_scope(entry: QueueEntry) -> bool:
            return branch is None or entry.branch == branch

        def change(entries: list[QueueEntry]) -> tuple[list[QueueEntry] | None, ClearOutcome]:
            index = _index_of(entries, sha, branch)
            if index is None:
                where = self.path if branch is None else f"{self.path} ({branch})"
                self._console.warning(f"processed commit {sha} not found in {where}")
                remaining = sum(1 for e in entries if in_scope(e))
                return None, ClearOutcome(found=False, removed=0, remaining=remaining)

            cleared = entries[index].branch
            kept = [
                entry
                for i, entry in enumerate(entries)
                if i > index or entry.branch != cleared
            ]
            removed = len(entries) - len(kept)
            self._console.info(f"removed {removed} processed entries up to {sha}")
            remaining = sum(1 for e in kept if in_scope(e))
            outcome = ClearOutcome(found=True, removed=removed, remaining=remaining)
            return with_estimates(kept, self.minutes_per_release), outcome

        return self._mutate(change)

    def position(self, sha: str) -> Result[QueuePosition | None, QueueError]:
        """Current position and wait of ``sha``, None if it is not queued."""
        loaded = self._store.load()
        if isinstance(loaded, Err):
            return loaded
        entries = loaded.value
        index = _index_of(entries, sha)
        if index is None:
            return Ok(None)
        pos = _positions(entries)[index]
        wait = estimate_wait(pos, self.minutes_per_release)
        return Ok(QueuePosition(position=pos, estimated_wait=wait))

    def status(self, branch: str | None = None) -> Result[QueueStatus, QueueError]:
        """Entry count and oldest timestamp, optionally for one branch only."""
        loaded = self._store.load()
        if isinstance(loaded, Err):
            return loaded
        entries = [e for e in loaded.value if branch is None or e.branch == branch]
        oldest = str(entries[0].timestamp) if entries else ""
        return Ok(QueueStatus(count=len(entries), oldest_timestamp=oldest))
