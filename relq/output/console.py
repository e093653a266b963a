"""Console output abstraction.

Services never print directly. They receive a ``ConsoleProtocol`` and report
through it; the CLI hands them a ``RichConsole`` configured with the log level
taken from config/flags, tests hand them a ``MockConsole``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Protocol

__all__ = [
    "LogLevel",
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class LogLevel(IntEnum):
    """Verbosity threshold. A message is shown when its level <= the console's."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @classmethod
    def parse(cls, value: str | None, *, default: LogLevel | None = None) -> LogLevel:
        """Parse ``error|warn|warning|info|debug`` (case-insensitive)."""
        fallback = default if default is not None else cls.INFO
        if not value:
            return fallback
        name = value.strip().lower()
        if name == "warning":
            name = "warn"
        for level in cls:
            if level.name.lower() == name:
                return level
        return fallback

    def __str__(self) -> str:
        return self.name.lower()


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DEBUG = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Logging interface handed to services."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message unconditionally."""
        ...

    def debug(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class RichConsole:
    """Console implementation using Rich.

    When ``annotations`` is set, warnings and errors are also emitted as
    GitHub Actions workflow commands so they show up on the run summary.
    """

    def __init__(self, *, level: LogLevel = LogLevel.INFO, annotations: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self.level = level
        self.annotations = annotations
        self._console = Console()
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DEBUG: "dim",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def _enabled(self, level: LogLevel) -> bool:
        return level <= self.level

    def _tagged(self, tag: str, color: str, message: str) -> None:
        from rich.markup import escape

        self._console.print(f"[{color}]{tag}[/{color}] {escape(message)}")

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def debug(self, message: str) -> None:
        if self._enabled(LogLevel.DEBUG):
            self._tagged("debug:", "dim", message)

    def info(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._tagged("info:", "cyan", message)

    def warning(self, message: str) -> None:
        if self._enabled(LogLevel.WARN):
            self._tagged("warning:", "yellow", message)
        if self.annotations:
            self._console.out(f"::warning::{message}", highlight=False)

    def error(self, message: str) -> None:
        self._tagged("error:", "red bold", message)
        if self.annotations:
            self._console.out(f"::error::{message}", highlight=False)

    def success(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._tagged("OK", "green", message)

    def header(self, message: str) -> None:
        if self._enabled(LogLevel.INFO):
            self._console.print(f"\n{message}", style="blue bold", markup=False)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    level: LogLevel = LogLevel.DEBUG
    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def debug(self, message: str) -> None:
        if LogLevel.DEBUG <= self.level:
            self.outputs.append(OutputRecord(f"debug: {message}", Style.DEBUG))

    def info(self, message: str) -> None:
        if LogLevel.INFO <= self.level:
            self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def warning(self, message: str) -> None:
        if LogLevel.WARN <= self.level:
            self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def success(self, message: str) -> None:
        if LogLevel.INFO <= self.level:
            self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def header(self, message: str) -> None:
        if LogLevel.INFO <= self.level:
            self.outputs.append(OutputRecord(message, Style.HEADER))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Return records whose message contains ``substring``."""
        return [o for o in self.outputs if substring in o.message]
