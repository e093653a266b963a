from __future__ import annotations

import os
import threading
import time
from pathlib import Path

import pytest

from relq.platform.files import LockTimeout, atomic_write_text, exclusive_lock


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "queue.json"
    atomic_write_text(path, "[]\n")

    assert path.read_text(encoding="utf-8") == "[]\n"


def test_atomic_write_text_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "queue.json"
    path.write_text("old", encoding="utf-8")

    atomic_write_text(path, "new", encoding="utf-8")

    assert path.read_text(encoding="utf-8") == "new"


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "queue.json"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload", encoding="utf-8")

    assert list(path.parent.glob(f".{path.name}.*.tmp")) == []
    assert not path.exists()


def test_exclusive_lock_creates_and_removes_lock_file(tmp_path: Path) -> None:
    lock = tmp_path / "locks" / "queue.json.lock"

    with exclusive_lock(lock, timeout=1.0, stale_after=60.0):
        assert lock.exists()

    assert not lock.exists()


def test_exclusive_lock_released_on_error(tmp_path: Path) -> None:
    lock = tmp_path / "queue.json.lock"

    with pytest.raises(RuntimeError):
        with exclusive_lock(lock, timeout=1.0, stale_after=60.0):
            raise RuntimeError("boom")

    assert not lock.exists()


def test_exclusive_lock_times_out_when_held(tmp_path: Path) -> None:
    lock = tmp_path / "queue.json.lock"
    lock.write_text("123\n", encoding="utf-8")

    with pytest.raises(LockTimeout) as exc:
        with exclusive_lock(lock, timeout=0.1, stale_after=60.0):
            pass

    assert exc.value.path == lock
    assert lock.exists()


def test_exclusive_lock_breaks_stale_lock(tmp_path: Path) -> None:
    lock = tmp_path / "queue.json.lock"
    lock.write_text("123\n", encoding="utf-8")
    old = time.time() - 600
    os.utime(lock, (old, old))

    with exclusive_lock(lock, timeout=0.1, stale_after=60.0):
        assert lock.read_text(encoding="utf-8").split()[0] == str(os.getpid())

    assert not lock.exists()


def test_exclusive_lock_serializes_threads(tmp_path: Path) -> None:
    lock = tmp_path / "queue.json.lock"
    inside = 0
    peak = 0
    guard = threading.Lock()

    def worker() -> None:
        nonlocal inside, peak
        with exclusive_lock(lock, timeout=10.0, stale_after=60.0):
            with guard:
                inside += 1
                peak = max(peak, inside)
            time.sleep(0.01)
            with guard:
                inside -= 1

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert peak == 1


def test_exclusive_lock_stale_break_admits_one_waiter(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    import relq.platform.files as files

    lock = tmp_path / "queue.json.lock"
    lock.write_text("999 crashed\n", encoding="utf-8")
    os.utime(lock, (0, 0))

    is_stale = files._is_stale

    def slow_is_stale(path: Path, stale_after: float) -> bool:
        time.sleep(0.2)
        return is_stale(path, stale_after)

    monkeypatch.setattr(files, "_is_stale", slow_is_stale)

    inside = 0
    peak = 0
    guard = threading.Lock()

    def worker() -> None:
        nonlocal inside, peak
        with exclusive_lock(lock, timeout=5.0, stale_after=60.0):
            with guard:
                inside += 1
                peak = max(peak, inside)
            time.sleep(0.3)
            with guard:
                inside -= 1

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert peak == 1
    assert not lock.exists()
    assert list(tmp_path.iterdir()) == []


def test_exclusive_lock_keeps_lock_it_no_longer_owns(tmp_path: Path) -> None:
    lock = tmp_path / "queue.json.lock"

    with exclusive_lock(lock, timeout=1.0, stale_after=60.0):
        lock.write_text("4242 someone-else\n", encoding="utf-8")

    assert lock.read_text(encoding="utf-8") == "4242 someone-else\n"
