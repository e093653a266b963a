"""GitHub Actions step outputs.

See https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Mapping
from pathlib import Path

import typer

__all__ = ["in_github_actions", "set_output"]


def in_github_actions(env: Mapping[str, str] | None = None) -> bool:
    source = os.environ if env is None else env
    return source.get("GITHUB_ACTIONS", "").lower() == "true"


def _format_entry(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def set_output(name: str, value: str, *, env: Mapping[str, str] | None = None) -> None:
    """Publish a step output.

    Appends to the file named by ``GITHUB_OUTPUT``. Outside of Actions (no
    such variable) the legacy ``::set-output`` command is printed instead,
    which doubles as readable output for local runs.

    Raises:
        OSError: the output file cannot be written.
    """
    source = os.environ if env is None else env
    target = source.get("GITHUB_OUTPUT")
    if not target:
        typer.echo(f"::set-output name={name}::{value}")
        return

    with Path(target).open("a", encoding="utf-8") as handle:
        handle.write(_format_entry(name, value))
