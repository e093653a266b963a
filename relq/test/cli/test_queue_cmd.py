from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from relq.cli.context import CLIContext
from relq.core.config import Config, QueueConfig
from relq.core.errors import ErrorCode
from relq.output.console import MockConsole


def _outputs(path: Path) -> dict[str, str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return dict(line.split("=", 1) for line in lines)


@pytest.fixture
def github_output(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    out = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(out))
    return out


def _use_context(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config: Config | None = None
) -> MockConsole:
    import relq.cli.commands.queue_cmd as queue_cmd

    console = MockConsole()
    ctx = CLIContext(root=tmp_path, config=config or Config(), console=console)
    monkeypatch.setattr(queue_cmd, "build_context", lambda: ctx)
    return console


def _reset(path: Path) -> None:
    path.write_text("", encoding="utf-8")


def test_add_clear_status_flow(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path)

    queue_cmd.add_cmd(sha="abc123", branch="beta")
    assert _outputs(github_output) == {"queue_position": "1", "estimated_time": "Next in queue"}

    _reset(github_output)
    queue_cmd.add_cmd(sha="def456", branch="beta")
    assert _outputs(github_output) == {"queue_position": "2", "estimated_time": "15 minutes"}

    _reset(github_output)
    queue_cmd.clear_cmd(processed_sha="abc123", branch="beta")
    assert _outputs(github_output) == {"removed": "1", "remaining": "1"}

    _reset(github_output)
    queue_cmd.status_cmd(branch="beta")
    outputs = _outputs(github_output)
    assert outputs["count"] == "1"
    assert outputs["oldest"].endswith("Z")

    data = json.loads((tmp_path / ".github/release_queue/beta.json").read_text(encoding="utf-8"))
    assert [e["sha"] for e in data] == ["def456"]


def test_add_rejects_invalid_branch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path)

    with pytest.raises(typer.Exit) as exc:
        queue_cmd.add_cmd(sha="abc123", branch="develop")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert not (tmp_path / ".github").exists()


def test_clear_unknown_sha_is_not_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    console = _use_context(monkeypatch, tmp_path)

    queue_cmd.clear_cmd(processed_sha="missing", branch="main")

    assert _outputs(github_output) == {"removed": "0", "remaining": "0"}
    assert console.has_warning()


def test_status_empty(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path)

    queue_cmd.status_cmd(branch="main")

    assert github_output.read_text(encoding="utf-8") == "count=0\noldest=\n"


def test_shared_layout_status_is_per_branch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path, Config(queue=QueueConfig(layout="shared")))

    queue_cmd.add_cmd(sha="b1", branch="beta")
    queue_cmd.add_cmd(sha="m1", branch="main")
    _reset(github_output)

    queue_cmd.status_cmd(branch="main")

    assert _outputs(github_output)["count"] == "1"
    assert (tmp_path / ".github/release_queue/queue.json").exists()


def test_lock_timeout_exits_io_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path, Config(queue=QueueConfig(lock_timeout=0.1)))
    lock = tmp_path / ".github/release_queue/beta.json.lock"
    lock.parent.mkdir(parents=True)
    lock.write_text("1\n", encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        queue_cmd.add_cmd(sha="abc123", branch="beta")

    assert exc.value.exit_code == int(ErrorCode.IO_ERROR)


def test_shared_layout_clear_ignores_other_branch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, github_output: Path
) -> None:
    import relq.cli.commands.queue_cmd as queue_cmd

    _use_context(monkeypatch, tmp_path, Config(queue=QueueConfig(layout="shared")))

    queue_cmd.add_cmd(sha="b1", branch="beta")
    queue_cmd.add_cmd(sha="m1", branch="main")
    _reset(github_output)

    queue_cmd.clear_cmd(processed_sha="b1", branch="main")

    assert _outputs(github_output) == {"removed": "0", "remaining": "1"}
    data = json.loads((tmp_path / ".github/release_queue/queue.json").read_text(encoding="utf-8"))
    assert [e["sha"] for e in data] == ["b1", "m1"]
