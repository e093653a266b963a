from __future__ import annotations

from relq.core.errors import ErrorCode


def test_exit_code_values_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.IO_ERROR) == 5


def test_str_and_flags() -> None:
    assert str(ErrorCode.IO_ERROR) == "io error"
    assert ErrorCode.OK.is_success
    assert ErrorCode.USER_ERROR.is_error
