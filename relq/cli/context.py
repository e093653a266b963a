from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relq.core.config import CONFIG_FILENAME, Config, load_config
from relq.core.errors import ErrorCode
from relq.core.result import Err
from relq.github.outputs import in_github_actions
from relq.output.console import ConsoleProtocol, LogLevel, RichConsole

CONFIG_ENV = "RELQ_CONFIG"
LOG_LEVEL_ENV = "RELQ_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol


def _load(root: Path) -> Config:
    explicit = os.environ.get(CONFIG_ENV)
    path = Path(explicit).expanduser() if explicit else root / CONFIG_FILENAME
    if not explicit and not path.exists():
        return Config()

    result = load_config(path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return result.value


def build_context() -> CLIContext:
    root = Path.cwd()
    config = _load(root)
    level = LogLevel.parse(
        os.environ.get(LOG_LEVEL_ENV),
        default=LogLevel.parse(config.log_level),
    )
    return CLIContext(
        root=root,
        config=config,
        console=RichConsole(level=level, annotations=in_github_actions()),
    )
