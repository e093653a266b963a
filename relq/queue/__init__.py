"""Release queue."""

from .errors import QueueError
from .model import ClearOutcome, QueueEntry, QueuePosition, QueueStatus, format_wait
from .service import ReleaseQueue
from .store import QueueStore, parse_queue_text

__all__ = [
    "ClearOutcome",
    "QueueEntry",
    "QueueError",
    "QueuePosition",
    "QueueStatus",
    "QueueStore",
    "ReleaseQueue",
    "format_wait",
    "parse_queue_text",
]
