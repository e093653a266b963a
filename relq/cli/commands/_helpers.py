from __future__ import annotations

from typing import NoReturn

import typer

from relq.core.errors import ErrorCode
from relq.github.outputs import set_output
from relq.queue.errors import QueueError
from relq.release.errors import ReleaseError


def exit_with(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def error_code(error: ReleaseError | QueueError) -> ErrorCode:
    match error.kind:
        case "invalid_branch" | "invalid_version":
            return ErrorCode.USER_ERROR
        case "git_failed":
            return ErrorCode.ENV_ERROR
        case "io_error" | "lock_timeout":
            return ErrorCode.IO_ERROR


def fail(error: ReleaseError | QueueError) -> NoReturn:
    exit_with(error.pretty(), code=error_code(error))


def emit_outputs(outputs: dict[str, str]) -> None:
    """Publish step outputs in insertion order."""
    for name, value in outputs.items():
        try:
            set_output(name, value)
        except OSError as e:
            exit_with(f"failed to write step output {name}: {e}", code=ErrorCode.IO_ERROR)
