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

"""Base exception hierarchy for :mod:`fileorders`."""

from __future__ import annotations


class FileOrdersError(Exception):
    """Base class for all fileorders exceptions.

    Callers can catch every library-specific failure with a single handler
    while standard Python exceptions keep propagating normally.

    Example:
        Waiting on a scheduled write::

            try:
                scheduler.write("notes.txt", "hello").result()
            except FileOrdersError as e:
                logger.error("Write failed: %s", e)

    Note:
        Subclasses also inherit from a standard exception type (``ValueError``,
        ``OSError``, ``RuntimeError``) so existing handlers keep working.
    """


class InvalidKindError(FileOrdersError, ValueError):
    """Raised when an order is built with an unrecognized operation kind.

    The order never reaches the pending registry; construction fails fast.

    Example::

        try:
            new_order("a.txt", "rename")
        except InvalidKindError:
            ...
    """


class DuplicateOrderError(FileOrdersError, ValueError):
    """Raised when an order id is registered twice while still live."""


class PathNotLockedError(FileOrdersError, RuntimeError):
    """Raised when releasing a path that is not currently locked."""


class OrderIOError(FileOrdersError, OSError):
    """Raised when the filesystem backend fails to execute an order.

    The original backend exception is available both as ``error`` and as
    ``__cause__``. The ``errno`` and ``filename`` of the wrapped error are
    carried over so ``OSError`` handlers can inspect them as usual.

    Failed I/O is delivered only to the caller that issued the order and is
    never retried automatically.

    Example::

        future = scheduler.delete("missing.txt")
        try:
            future.result()
        except OrderIOError as e:
            assert isinstance(e.error, FileNotFoundError)
    """

    def __init__(
        self,
        message: str,
        *,
        order_id: str,
        path: str,
        kind: str,
        error: OSError,
    ) -> None:
        super().__init__(error.errno, message, error.filename)
        self.order_id = order_id
        self.path = path
        self.kind = kind
        self.error = error
        self.__cause__ = error

    def __str__(self) -> str:
        return self.strerror or super().__str__()


class UnexpectedDispatchError(FileOrdersError, RuntimeError):
    """Raised when dispatching an order fails with a non-I/O exception.

    This indicates a defect in the backend rather than an ordinary filesystem
    failure. It is surfaced to the issuing caller instead of being dropped,
    and should be treated as non-recoverable.
    """

    def __init__(self, message: str, *, order_id: str, path: str, kind: str) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.path = path
        self.kind = kind


class SchedulerClosedError(FileOrdersError, RuntimeError):
    """Raised when submitting to, or waiting on, a closed scheduler."""


__all__ = [
    "DuplicateOrderError",
    "FileOrdersError",
    "InvalidKindError",
    "OrderIOError",
    "PathNotLockedError",
    "SchedulerClosedError",
    "UnexpectedDispatchError",
]
