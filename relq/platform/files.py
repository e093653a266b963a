"""Filesystem helpers: atomic writes and an exclusive lock file."""

from __future__ import annotations

import os
import tempfile
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

__all__ = ["LockTimeout", "atomic_write_text", "exclusive_lock"]

_POLL_SECONDS = 0.05


class LockTimeout(OSError):
    """Raised when a lock file could not be acquired in time."""

    def __init__(self, path: Path, timeout: float) -> None:
        super().__init__(f"could not acquire {path} within {timeout:g}s")
        self.path = path
        self.timeout = timeout


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def _try_create(lock_path: Path, token: str) -> bool:
    try:
        fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        return False
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(f"{token}\n")
    return True


def _read_token(lock_path: Path) -> str | None:
    try:
        return lock_path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None


def _is_stale(lock_path: Path, stale_after: float) -> bool:
    try:
        age = time.time() - lock_path.stat().st_mtime
    except FileNotFoundError:
        return False
    return age > stale_after


def _break_stale(lock_path: Path, expected: str) -> None:
    """Remove a stale lock, but only if it still holds ``expected``.

    The lock is first renamed to a unique name, so of several waiters that
    judged it stale only one gets it. A waiter that instead renamed a lock
    taken in the meantime links it back.
    """
    tombstone = lock_path.with_name(f"{lock_path.name}.{uuid.uuid4().hex}.stale")
    try:
        os.rename(lock_path, tombstone)
    except FileNotFoundError:
        return
    try:
        if _read_token(tombstone) != expected:
            try:
                os.link(tombstone, lock_path)
            except FileExistsError:
                pass
    finally:
        tombstone.unlink(missing_ok=True)


def _release(lock_path: Path, token: str) -> None:
    if _read_token(lock_path) == token:
        lock_path.unlink(missing_ok=True)


@contextmanager
def exclusive_lock(
    lock_path: Path,
    *,
    timeout: float,
    stale_after: float,
) -> Iterator[None]:
    """Hold ``lock_path`` for the duration of the block.

    The lock is a file created with O_EXCL, so it works across processes on
    any local filesystem. It holds the owner's pid and a unique token; only
    the owner removes it. A lock file older than ``stale_after`` seconds is
    assumed to belong to a crashed run and is broken.

    Raises:
        LockTimeout: the lock is still held after ``timeout`` seconds.
        OSError: the lock directory cannot be created.
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    token = f"{os.getpid()} {uuid.uuid4().hex}"
    deadline = time.monotonic() + timeout

    while not _try_create(lock_path, token):
        holder = _read_token(lock_path)
        if holder is not None and _is_stale(lock_path, stale_after):
            _break_stale(lock_path, holder)
            continue
        if time.monotonic() >= deadline:
            raise LockTimeout(lock_path, timeout)
        time.sleep(_POLL_SECONDS)

    try:
        yield
    finally:
        _release(lock_path, token)
