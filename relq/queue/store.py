"""Queue file persistence.

The on-disk format is a JSON array of entry objects. Reading is tolerant:

1. the whole file as one JSON document (an array, a single object, or the
   older ``{"items": [...]}`` layout);
2. failing that, one JSON object per line, skipping lines that do not parse.

Writing always replaces the whole file atomically.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from relq.core.result import Err, Ok, Result
from relq.core.structured import as_obj_list, as_str_dict, get_list
from relq.output.console import ConsoleProtocol
from relq.platform.files import LockTimeout, atomic_write_text, exclusive_lock
from relq.queue.errors import QueueError
from relq.queue.model import QueueEntry

__all__ = ["ParsedQueue", "QueueStore", "lock_error", "parse_queue_text", "render_queue"]


@dataclass(frozen=True, slots=True)
class ParsedQueue:
    entries: list[QueueEntry]
    line_fallback: bool = False
    skipped: int = 0
    duplicates: int = 0


def _entries_from_items(items: Sequence[object]) -> tuple[list[QueueEntry], int]:
    entries: list[QueueEntry] = []
    skipped = 0
    for item in items:
        data = as_str_dict(item)
        entry = QueueEntry.from_dict(data) if data is not None else None
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)
    return entries, skipped


def _parse_document(obj: object) -> tuple[list[QueueEntry], int] | None:
    items = as_obj_list(obj)
    if items is not None:
        return _entries_from_items(items)

    data = as_str_dict(obj)
    if data is None:
        return None
    legacy = get_list(data, "items")
    if legacy is not None:
        return _entries_from_items(legacy)
    return _entries_from_items([data])


def _drop_duplicates(entries: list[QueueEntry]) -> tuple[list[QueueEntry], int]:
    """Keep the first entry per sha."""
    seen: set[str] = set()
    unique: list[QueueEntry] = []
    for entry in entries:
        if entry.sha in seen:
            continue
        seen.add(entry.sha)
        unique.append(entry)
    return unique, len(entries) - len(unique)


def parse_queue_text(text: str) -> ParsedQueue:
    """Parse queue file content. Never fails; bad input yields fewer entries."""
    if not text.strip():
        return ParsedQueue(entries=[])

    document: tuple[list[QueueEntry], int] | None = None
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError:
        pass
    else:
        document = _parse_document(obj)
    if document is not None:
        unique, duplicates = _drop_duplicates(document[0])
        return ParsedQueue(entries=unique, skipped=document[1], duplicates=duplicates)

    entries: list[QueueEntry] = []
    skipped = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        try:
            line_obj: object = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        data = as_str_dict(line_obj)
        entry = QueueEntry.from_dict(data) if data is not None else None
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)

    unique, duplicates = _drop_duplicates(entries)
    return ParsedQueue(
        entries=unique,
        line_fallback=True,
        skipped=skipped,
        duplicates=duplicates,
    )


def render_queue(entries: Sequence[QueueEntry]) -> str:
    return json.dumps([e.to_dict() for e in entries], indent=2) + "\n"


class QueueStore:
    """Reads and writes one queue file."""

    def __init__(
        self,
        path: Path,
        *,
        console: ConsoleProtocol,
        lock_timeout: float = 10.0,
        stale_lock_seconds: float = 300.0,
    ) -> None:
        self.path = path
        self._console = console
        self._lock_timeout = lock_timeout
        self._stale_lock_seconds = stale_lock_seconds

    @property
    def lock_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.lock")

    def load(self) -> Result[list[QueueEntry], QueueError]:
        """Read all entries. A missing file is an empty queue."""
        try:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return Ok([])
        except OSError as e:
            return Err(
                QueueError(
                    kind="io_error",
                    message=f"failed to read queue file: {e}",
                    hint=str(self.path),
                )
            )

        parsed = parse_queue_text(text)
        if parsed.line_fallback:
            self._console.warning(
                f"{self.path} is not a JSON array, read it line by line "
                f"({len(parsed.entries)} entries)"
            )
        if parsed.skipped:
            self._console.warning(
                f"skipped {parsed.skipped} unreadable queue entries in {self.path}"
            )
        if parsed.duplicates:
            self._console.warning(
                f"dropped {parsed.duplicates} duplicate queue entries in {self.path}"
            )
        return Ok(parsed.entries)

    def save(self, entries: Sequence[QueueEntry]) -> Result[None, QueueError]:
        """Replace the file content with ``entries``."""
        try:
            atomic_write_text(self.path, render_queue(entries), encoding="utf-8")
        except OSError as e:
            return Err(
                QueueError(
                    kind="io_error",
                    message=f"failed to write queue file: {e}",
                    hint=str(self.path),
                )
            )
        self._console.debug(f"wrote {len(entries)} entries to {self.path}")
        return Ok(None)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the queue's lock file.

        Raises:
            LockTimeout: another writer kept the lock past the timeout.
        """
        with exclusive_lock(
            self.lock_path,
            timeout=self._lock_timeout,
            stale_after=self._stale_lock_seconds,
        ):
            yield


def lock_error(e: OSError, path: Path) -> QueueError:
    if isinstance(e, LockTimeout):
        return QueueError(
            kind="lock_timeout",
            message=f"queue is locked by another run: {e}",
            hint=f"remove {e.path} if no other release job is running",
        )
    return QueueError(kind="io_error", message=f"failed to lock queue: {e}", hint=str(path))
