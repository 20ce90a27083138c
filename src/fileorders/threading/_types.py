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

"""Protocols for the scheduler's execution and delay seams."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Future(Protocol[T_co]):
    """Minimal future interface for submitted work."""

    def result(self, timeout: float | None = None) -> T_co:
        """Wait for and return the result.

        Raises:
            TimeoutError: If timeout expires before the result is available.
            Exception: If the task raised an exception.
        """
        ...

    def done(self) -> bool: ...


@runtime_checkable
class Executor(Protocol):
    """Runs backend calls off the submitting thread.

    Production code uses a thread pool. Tests either run work inline
    (:class:`FakeExecutor`) or hold it until released
    (:class:`ManualExecutor`) to control interleaving.
    """

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        """Submit a zero-argument callable for execution."""
        ...

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work, optionally waiting for running tasks."""
        ...


@runtime_checkable
class TimerQueue(Protocol):
    """Delay queue for retrying admission and path-lock acquisition.

    Callbacks are run once, no earlier than ``delay`` seconds after being
    scheduled, in due order. Callbacks that raise are logged and do not
    stop the queue.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` to run after ``delay`` seconds.

        Raises:
            RuntimeError: If the queue has been closed.
        """
        ...

    @property
    def pending(self) -> int:
        """Number of callbacks that have not fired yet."""
        ...

    def close(self, *, wait: bool = True) -> None:
        """Drop pending callbacks and stop the queue."""
        ...


__all__ = [
    "Executor",
    "Future",
    "T",
    "TimerQueue",
]
