"""Output abstractions (console, log levels)."""

from .console import ConsoleProtocol, LogLevel, MockConsole, OutputRecord, RichConsole, Style

__all__ = [
    "ConsoleProtocol",
    "LogLevel",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]
