"""Platform helpers: subprocesses and filesystem."""

from .files import LockTimeout, atomic_write_text, exclusive_lock
from .process import ProcessError, run

__all__ = [
    "LockTimeout",
    "ProcessError",
    "atomic_write_text",
    "exclusive_lock",
    "run",
]
