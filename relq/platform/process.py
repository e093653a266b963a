"""Subprocess execution with Result-based error handling.

The only external commands relq runs are git queries; they go through
``run`` so a missing binary or a non-zero exit becomes a value, not an
exception.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from relq.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]

# Arguments kept in the one-line summary of a failed command.
_SUMMARY_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out or never started.

    ``returncode`` is -1 when there is no exit status; ``stderr`` then holds
    the launch failure or timeout message.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SUMMARY_ARGS])
        if len(self.command) > _SUMMARY_ARGS:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _not_run(cmd: Sequence[str], reason: str) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=reason))


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout on exit code 0."""
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return _not_run(cmd, f"Command timed out after {timeout}s")
    except OSError as e:
        return _not_run(cmd, str(e))

    if proc.returncode == 0:
        return Ok(proc.stdout)
    return Err(
        ProcessError(
            command=tuple(cmd),
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
    )
