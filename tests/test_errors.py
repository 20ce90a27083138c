# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the exception hierarchy."""

from __future__ import annotations

import errno

import pytest

from fileorders.errors import (
    DuplicateOrderError,
    FileOrdersError,
    InvalidKindError,
    OrderIOError,
    PathNotLockedError,
    SchedulerClosedError,
    UnexpectedDispatchError,
)


@pytest.mark.parametrize(
    ("error_type", "builtin"),
    [
        (InvalidKindError, ValueError),
        (DuplicateOrderError, ValueError),
        (PathNotLockedError, RuntimeError),
        (OrderIOError, OSError),
        (UnexpectedDispatchError, RuntimeError),
        (SchedulerClosedError, RuntimeError),
    ],
)
def test_errors_share_base_and_builtin(
    error_type: type[Exception], builtin: type[Exception]
) -> None:
    assert issubclass(error_type, FileOrdersError)
    assert issubclass(error_type, builtin)


class TestOrderIOError:
    """Tests for OrderIOError."""

    def test_wraps_backend_error(self) -> None:
        cause = FileNotFoundError(errno.ENOENT, "No such file", "missing.txt")
        error = OrderIOError(
            "delete of 'missing.txt' failed",
            order_id="abc",
            path="missing.txt",
            kind="delete",
            error=cause,
        )

        assert error.error is cause
        assert error.__cause__ is cause
        assert error.errno == errno.ENOENT
        assert error.filename == "missing.txt"
        assert error.order_id == "abc"
        assert error.path == "missing.txt"
        assert error.kind == "delete"
        assert str(error) == "delete of 'missing.txt' failed"

    def test_wraps_error_without_errno(self) -> None:
        error = OrderIOError(
            "read failed",
            order_id="abc",
            path="a",
            kind="read",
            error=OSError("opaque"),
        )

        assert error.errno is None
        assert str(error) == "read failed"

    def test_caught_by_oserror_handlers(self) -> None:
        with pytest.raises(OSError):
            raise OrderIOError(
                "write failed",
                order_id="abc",
                path="a",
                kind="write",
                error=PermissionError(errno.EACCES, "denied"),
            )


def test_unexpected_dispatch_error_carries_order() -> None:
    error = UnexpectedDispatchError("boom", order_id="abc", path="a", kind="append")

    assert (error.order_id, error.path, error.kind) == ("abc", "a", "append")
    assert str(error) == "boom"
