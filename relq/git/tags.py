"""Tag retrieval from a local git checkout.

This is the thin I/O step in front of the resolver: fetch tags from the
remote, then list them. Failures are returned, never retried here.
"""

from __future__ import annotations

from pathlib import Path

from relq.core.result import Err, Ok, Result
from relq.platform.process import ProcessError
from relq.platform.process import run as run_process
from relq.release.errors import ReleaseError

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = ["TagSource"]


def _git_error(command: str, e: ProcessError) -> ReleaseError:
    return ReleaseError(
        kind="git_failed",
        message=f"git {command} failed: {e.stderr.strip() or e}",
        hint=f"exit {e.returncode}",
    )


class TagSource:
    """Reads release tags from the repository at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def fetch(self) -> Result[None, ReleaseError]:
        """Run ``git fetch --tags --force``."""
        match self._run(["fetch", "--tags", "--force"]):
            case Err(e):
                return Err(_git_error("fetch --tags", e))
            case Ok(_):
                return Ok(None)

    def list_tags(self, pattern: str | None = None) -> Result[list[str], ReleaseError]:
        """List local tags, optionally filtered by a ``git tag -l`` glob."""
        args = ["tag", "-l"]
        if pattern:
            args.append(pattern)
        match self._run(args):
            case Err(e):
                return Err(_git_error("tag -l", e))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def release_tags(self, *, fetch: bool = True) -> Result[list[str], ReleaseError]:
        """Optionally fetch, then return every ``stable-v*``/``beta-v*`` tag."""
        if fetch:
            fetched = self.fetch()
            if isinstance(fetched, Err):
                return fetched

        tags: list[str] = []
        for pattern in ("beta-v*", "stable-v*"):
            listed = self.list_tags(pattern)
            if isinstance(listed, Err):
                return listed
            tags.extend(listed.value)
        return Ok(tags)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        timeout = _GIT_NETWORK_TIMEOUT_SECONDS if args[0] == "fetch" else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
