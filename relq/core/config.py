"""Typed configuration loading and access.

Configuration lives in an optional ``relq.toml``. Every section and key is
optional; anything missing or of the wrong type falls back to the defaults
below. Only unreadable files and TOML syntax errors are reported.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "QueueConfig",
    "QueueLayout",
    "VersionConfig",
    "load_config",
    "queue_path",
]

CONFIG_FILENAME = "relq.toml"

DEFAULT_VERSION = "beta-v0.0.1"
DEFAULT_QUEUE_DIR = ".github/release_queue"
DEFAULT_MINUTES_PER_RELEASE = 15
DEFAULT_LOCK_TIMEOUT = 10.0
DEFAULT_STALE_LOCK_SECONDS = 300.0

_LOG_LEVELS = ("error", "warn", "info", "debug")

QueueLayout = Literal["per-branch", "shared"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class VersionConfig:
    default: str = DEFAULT_VERSION


@dataclass(frozen=True, slots=True)
class QueueConfig:
    """Where queue files live and how waits are estimated.

    Attributes:
        dir: Directory holding queue files (relative to the working dir).
        layout: ``per-branch`` writes ``<branch>.json``, ``shared`` writes
            a single ``queue.json`` for every branch.
        minutes_per_release: Estimated processing time per queued release.
        lock_timeout: Seconds to wait for the queue lock.
        stale_lock_seconds: Age after which a leftover lock file is broken.
    """

    dir: str = DEFAULT_QUEUE_DIR
    layout: QueueLayout = "per-branch"
    minutes_per_release: int = DEFAULT_MINUTES_PER_RELEASE
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    stale_lock_seconds: float = DEFAULT_STALE_LOCK_SECONDS


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    log_level: str = "info"
    version: VersionConfig = field(default_factory=VersionConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        version: StrDict = get_table(data, "version") or {}
        queue: StrDict = get_table(data, "queue") or {}

        log_level = (get_str(data, "log_level") or "info").lower()
        if log_level not in _LOG_LEVELS:
            log_level = "info"

        layout: QueueLayout = "per-branch"
        if get_str(queue, "layout") == "shared":
            layout = "shared"

        minutes = get_int(queue, "minutes_per_release")
        if minutes is None or minutes <= 0:
            minutes = DEFAULT_MINUTES_PER_RELEASE

        lock_timeout = get_float(queue, "lock_timeout")
        if lock_timeout is None or lock_timeout < 0:
            lock_timeout = DEFAULT_LOCK_TIMEOUT

        stale = get_float(queue, "stale_lock_seconds")
        if stale is None or stale <= 0:
            stale = DEFAULT_STALE_LOCK_SECONDS

        return cls(
            log_level=log_level,
            version=VersionConfig(default=get_str(version, "default") or DEFAULT_VERSION),
            queue=QueueConfig(
                dir=get_str(queue, "dir") or DEFAULT_QUEUE_DIR,
                layout=layout,
                minutes_per_release=minutes,
                lock_timeout=lock_timeout,
                stale_lock_seconds=stale,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relq.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    match _parse_toml(path):
        case Err() as err:
            return err
        case Ok(data):
            return Ok(Config.from_dict(data))


def queue_path(config: Config, branch: str, *, root: Path) -> Path:
    """Return the queue file used for ``branch`` under ``root``."""
    base = root / config.queue.dir
    if config.queue.layout == "shared":
        return base / "queue.json"
    return base / f"{branch}.json"
