from __future__ import annotations

import typer

from relq.cli.commands._helpers import emit_outputs, fail
from relq.cli.context import build_context
from relq.core.result import Err
from relq.queue.service import ReleaseQueue
from relq.release.resolver import normalize_branch

queue_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Release queue: add, clear and inspect pending releases.",
)


def _branch_option(envvar: str = "INPUT_BRANCH") -> str:
    return typer.Option(..., "--branch", envvar=envvar, help="Release branch: main|beta")


@queue_app.command("add")
def add_cmd(
    sha: str = typer.Option(..., "--sha", envvar="INPUT_SHA", help="Commit to release"),
    branch: str = _branch_option(),
) -> None:
    """Queue a release for a commit (idempotent per commit)."""
    ctx = build_context()
    checked = normalize_branch(branch)
    if isinstance(checked, Err):
        fail(checked.error)

    queue = ReleaseQueue.from_config(
        ctx.config, branch=checked.value, root=ctx.root, console=ctx.console
    )
    queued = queue.enqueue(sha, checked.value)
    if isinstance(queued, Err):
        fail(queued.error)

    emit_outputs(
        {
            "queue_position": str(queued.value.position),
            "estimated_time": queued.value.estimated_wait,
        }
    )
    ctx.console.success(
        f"release queued at position {queued.value.position} ({queued.value.estimated_wait})"
    )


@queue_app.command("clear")
def clear_cmd(
    processed_sha: str = typer.Option(
        ...,
        "--processed-sha",
        envvar="INPUT_PROCESSED_SHA",
        help="Last processed commit; it and all older entries are removed",
    ),
    branch: str = _branch_option(),
) -> None:
    """Remove a processed commit and everything queued before it."""
    ctx = build_context()
    checked = normalize_branch(branch)
    if isinstance(checked, Err):
        fail(checked.error)

    queue = ReleaseQueue.from_config(
        ctx.config, branch=checked.value, root=ctx.root, console=ctx.console
    )
    shared = ctx.config.queue.layout == "shared"
    cleared = queue.clear_up_to(processed_sha, checked.value if shared else None)
    if isinstance(cleared, Err):
        fail(cleared.error)

    emit_outputs(
        {
            "removed": str(cleared.value.removed),
            "remaining": str(cleared.value.remaining),
        }
    )


@queue_app.command("status")
def status_cmd(branch: str = _branch_option()) -> None:
    """Report queue length and the oldest queued timestamp."""
    ctx = build_context()
    checked = normalize_branch(branch)
    if isinstance(checked, Err):
        fail(checked.error)

    queue = ReleaseQueue.from_config(
        ctx.config, branch=checked.value, root=ctx.root, console=ctx.console
    )
    shared = ctx.config.queue.layout == "shared"
    status = queue.status(checked.value if shared else None)
    if isinstance(status, Err):
        fail(status.error)

    emit_outputs(
        {
            "count": str(status.value.count),
            "oldest": status.value.oldest_timestamp,
        }
    )
