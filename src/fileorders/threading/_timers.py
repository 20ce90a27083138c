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

"""Delay queues that run retry callbacks once they become due.

:class:`SystemTimerQueue` owns a single daemon thread sleeping on a
condition variable until the earliest timer is due. :class:`FakeTimerQueue`
never starts a thread; tests move time forward with :meth:`advance`.

Example (testing)::

    clock = FakeClock()
    timers = FakeTimerQueue(clock=clock)
    fired: list[str] = []
    timers.call_later(0.01, lambda: fired.append("retry"))

    timers.advance(0.005)
    assert fired == []
    timers.advance(0.005)
    assert fired == ["retry"]
"""

from __future__ import annotations

import heapq
import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from fileorders.clock import SYSTEM_CLOCK, FakeClock, MonotonicClock
from fileorders.logging import StructuredLogger, get_logger
from fileorders.threading._worker import BackgroundWorker

logger: StructuredLogger = get_logger(__name__, context={"component": "timers"})


@dataclass(order=True, slots=True)
class _Timer:
    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    immediate: bool = field(default=False, compare=False)


def _fire(timer: _Timer) -> None:
    try:
        timer.callback()
    except Exception:
        logger.exception(
            "Timer callback failed.",
            event="timer.callback_failed",
            context={"callback": repr(timer.callback)},
        )


class SystemTimerQueue:
    """Production delay queue backed by one background thread.

    The thread is started lazily on the first :meth:`call_later` and exits
    when the queue is closed. Callbacks run on that thread, so they should
    only do bookkeeping and hand real work to an executor.
    """

    def __init__(
        self,
        *,
        clock: MonotonicClock = SYSTEM_CLOCK,
        name: str = "fileorders-timers",
    ) -> None:
        super().__init__()
        self._clock = clock
        self._heap: list[_Timer] = []
        self._sequence = itertools.count()
        self._condition = threading.Condition()
        self._closed = False
        self._worker = BackgroundWorker(self._run, name=name)
        self._started = False

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        with self._condition:
            if self._closed:
                msg = "Timer queue has been closed"
                raise RuntimeError(msg)
            timer = _Timer(
                due=self._clock.monotonic() + max(delay, 0.0),
                sequence=next(self._sequence),
                callback=callback,
            )
            heapq.heappush(self._heap, timer)
            if not self._started:
                self._started = True
                self._worker.start()
            self._condition.notify()

    @property
    def pending(self) -> int:
        with self._condition:
            return len(self._heap)

    def close(self, *, wait: bool = True) -> None:
        with self._condition:
            self._closed = True
            self._heap.clear()
            self._condition.notify_all()
        if wait:
            _ = self._worker.stop()

    def _next_due(self) -> _Timer | None:
        """Block until a timer is due; ``None`` once the queue is closed."""
        with self._condition:
            while not self._closed:
                if not self._heap:
                    _ = self._condition.wait()
                    continue
                remaining = self._heap[0].due - self._clock.monotonic()
                if remaining <= 0:
                    return heapq.heappop(self._heap)
                _ = self._condition.wait(timeout=remaining)
            return None

    def _run(self) -> None:
        while (timer := self._next_due()) is not None:
            _fire(timer)


@dataclass
class FakeTimerQueue:
    """Deterministic delay queue driven by a :class:`FakeClock`.

    :meth:`advance` moves the clock forward timer by timer, so a callback
    observes the clock at its own due time and any timers it schedules are
    considered within the same advance. Zero-delay timers scheduled while
    advancing wait for the next call, which keeps a callback that re-arms
    itself immediately from looping forever.
    """

    clock: FakeClock = field(default_factory=FakeClock)
    _heap: list[_Timer] = field(default_factory=list, repr=False)  # pyright: ignore[reportUnknownVariableType]
    _sequence: itertools.count[int] = field(default_factory=itertools.count, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _closed: bool = field(default=False, repr=False)
    _fired: int = field(default=0, repr=False)

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._closed:
                msg = "Timer queue has been closed"
                raise RuntimeError(msg)
            heapq.heappush(
                self._heap,
                _Timer(
                    due=self.clock.monotonic() + max(delay, 0.0),
                    sequence=next(self._sequence),
                    callback=callback,
                    immediate=delay <= 0,
                ),
            )

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._heap)

    @property
    def fired(self) -> int:
        """Total number of callbacks run so far."""
        with self._lock:
            return self._fired

    def advance(self, seconds: float) -> int:
        """Move time forward by ``seconds``, firing timers that fall due.

        Returns:
            Number of callbacks fired.
        """
        start = self.clock.monotonic()
        target = start + seconds
        with self._lock:
            limit = next(self._sequence)

        held: list[_Timer] = []
        fired = 0
        while True:
            with self._lock:
                if not self._heap or self._heap[0].due > target:
                    break
                timer = heapq.heappop(self._heap)
                if timer.immediate and timer.sequence > limit:
                    held.append(timer)
                    continue
                self._fired += 1
            step = timer.due - self.clock.monotonic()
            if step > 0:
                self.clock.advance(step)
            _fire(timer)
            fired += 1

        with self._lock:
            for timer in held:
                heapq.heappush(self._heap, timer)
        remaining = target - self.clock.monotonic()
        if remaining > 0:
            self.clock.advance(remaining)
        return fired

    def run_due(self) -> int:
        """Fire timers that are already due without moving the clock."""
        return self.advance(0)

    def close(self, *, wait: bool = True) -> None:
        del wait  # unused
        with self._lock:
            self._closed = True
            self._heap.clear()


__all__ = [
    "FakeTimerQueue",
    "SystemTimerQueue",
]
