"""GitHub Actions integration."""

from .outputs import in_github_actions, set_output

__all__ = ["in_github_actions", "set_output"]
