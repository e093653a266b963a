"""Git access (tags only)."""

from .tags import TagSource

__all__ = ["TagSource"]
