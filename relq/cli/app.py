from __future__ import annotations

import os
from pathlib import Path

import typer

from relq import __version__
from relq.cli.commands.queue_cmd import queue_app
from relq.cli.commands.version_cmd import next_version, validate
from relq.cli.context import CONFIG_ENV, LOG_LEVEL_ENV
from relq.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command("next-version")(next_version)
app.command("validate-version")(validate)

# Sub-apps
app.add_typer(queue_app, name="queue")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        is_eager=True,
        callback=_show_version,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to relq.toml (default: ./relq.toml if present)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: config file not found: {path}", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        os.environ[CONFIG_ENV] = str(path)

    if verbose:
        os.environ[LOG_LEVEL_ENV] = "debug"


def main() -> None:
    app()
