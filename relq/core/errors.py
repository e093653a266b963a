"""Exit codes for CLI commands.

Every workflow step maps its failure onto one of these codes so that the
surrounding GitHub Actions job can tell a bad input from a broken runner.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are part of the CLI contract.

    - 0: Success
    - 1: User error (unsupported branch, malformed version input)
    - 2: Environment error (git missing or failing, bad config file)
    - 5: I/O error (queue file unreadable/unwritable, lock not acquired)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
