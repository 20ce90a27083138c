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

"""Executor implementations for backend dispatch."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future as ConcurrentFuture, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

from fileorders.threading._types import Future

T = TypeVar("T")


@dataclass
class CompletedFuture[T]:
    """A future that is already complete with a value or exception."""

    _value: T | None = None
    _exception: BaseException | None = None

    @classmethod
    def of(cls, value: T) -> CompletedFuture[T]:
        return CompletedFuture[T](_value=value)

    @classmethod
    def failed(cls, exc: BaseException) -> CompletedFuture[T]:
        return CompletedFuture[T](_exception=exc)

    def result(self, timeout: float | None = None) -> T:
        del timeout  # unused
        if self._exception is not None:
            raise self._exception
        return self._value  # type: ignore[return-value]

    def done(self) -> bool:
        return True


@dataclass
class SystemExecutor:
    """Production executor backed by a lazily created thread pool.

    Example::

        with SystemExecutor(max_workers=8) as executor:
            future = executor.submit(lambda: backend.read_bytes("a.txt"))
            data = future.result()
    """

    max_workers: int | None = None
    thread_name_prefix: str = "fileorders-dispatch"
    _executor: ThreadPoolExecutor | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _shutdown: bool = field(default=False, repr=False)

    def _ensure_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._shutdown:
                msg = "Executor has been shut down"
                raise RuntimeError(msg)
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix=self.thread_name_prefix,
                )
            return self._executor

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        return self._ensure_executor().submit(fn)

    def shutdown(self, *, wait: bool = True) -> None:
        with self._lock:
            self._shutdown = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> SystemExecutor:
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown(wait=True)


@dataclass
class FakeExecutor:
    """Test executor that runs tasks synchronously in the calling thread.

    Example::

        executor = FakeExecutor()
        future = executor.submit(lambda: 42)
        assert future.done()
        assert len(executor.submitted) == 1
    """

    submitted: list[Callable[[], object]] = field(  # pyright: ignore[reportUnknownVariableType]
        default_factory=list,
    )
    _shutdown: bool = field(default=False, repr=False)

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        if self._shutdown:
            msg = "Executor has been shut down"
            raise RuntimeError(msg)

        self.submitted.append(fn)
        try:
            return CompletedFuture.of(fn())
        except BaseException as e:
            return CompletedFuture.failed(e)

    def shutdown(self, *, wait: bool = True) -> None:
        del wait  # unused
        self._shutdown = True


@dataclass
class ManualExecutor:
    """Test executor that holds submitted work until explicitly released.

    Work stays queued, and in flight from the scheduler's point of view,
    until :meth:`run_next` or :meth:`run_all` is called. This makes it
    possible to observe a path lock being held while a second order for the
    same path is retried.

    Example::

        executor = ManualExecutor()
        future = executor.submit(lambda: "done")
        assert not future.done()
        assert executor.run_next()
        assert future.result() == "done"
    """

    _queue: deque[tuple[Callable[[], Any], ConcurrentFuture[Any]]] = field(  # pyright: ignore[reportUnknownVariableType]
        default_factory=deque,
        repr=False,
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _shutdown: bool = field(default=False, repr=False)

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        future: ConcurrentFuture[T] = ConcurrentFuture()
        with self._lock:
            if self._shutdown:
                msg = "Executor has been shut down"
                raise RuntimeError(msg)
            self._queue.append((fn, future))
        return future

    @property
    def pending(self) -> int:
        """Number of submitted tasks that have not run yet."""
        with self._lock:
            return len(self._queue)

    def run_next(self) -> bool:
        """Run the oldest queued task.

        Returns:
            False if nothing was queued.
        """
        with self._lock:
            if not self._queue:
                return False
            fn, future = self._queue.popleft()

        try:
            future.set_result(fn())
        except BaseException as e:
            future.set_exception(e)
        return True

    def run_all(self) -> int:
        """Run queued tasks, including ones submitted meanwhile, until empty.

        Returns:
            Number of tasks run.
        """
        count = 0
        while self.run_next():
            count += 1
        return count

    def shutdown(self, *, wait: bool = True) -> None:
        """Refuse new work; with ``wait`` the queued tasks are run first."""
        if wait:
            _ = self.run_all()
        with self._lock:
            self._shutdown = True


__all__ = [
    "CompletedFuture",
    "FakeExecutor",
    "ManualExecutor",
    "SystemExecutor",
]
