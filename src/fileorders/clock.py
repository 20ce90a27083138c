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

"""Injectable time sources for the scheduler and its retry timers.

Two time domains are used:

- **Monotonic time** (float seconds): when a delayed retry becomes due.
- **Wall-clock time** (UTC datetime): when an order was submitted or
  completed, as recorded on orders and receipts.

Example (testing)::

    from fileorders.clock import FakeClock

    clock = FakeClock()
    clock.advance(0.01)
    assert clock.monotonic() == 0.01
"""

from __future__ import annotations

import threading
import time as _time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Final, Protocol, runtime_checkable


@runtime_checkable
class MonotonicClock(Protocol):
    """Source of monotonic seconds; never goes backwards."""

    def monotonic(self) -> float: ...


@runtime_checkable
class WallClock(Protocol):
    """Source of timezone-aware UTC datetimes."""

    def utcnow(self) -> datetime: ...


@runtime_checkable
class Clock(MonotonicClock, WallClock, Protocol):
    """Combined clock used by :class:`~fileorders.orders.Scheduler`.

    ``sleep`` blocks the caller on this clock; :class:`FakeClock` returns
    immediately after advancing its own time. Timer queues do not sleep;
    they wait on a condition variable and only read ``monotonic``.
    """

    def sleep(self, seconds: float) -> None: ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Production clock backed by :mod:`time` and :mod:`datetime`."""

    def monotonic(self) -> float:
        return _time.monotonic()

    def utcnow(self) -> datetime:
        return datetime.now(UTC)

    def sleep(self, seconds: float) -> None:
        _time.sleep(seconds)


SYSTEM_CLOCK: Final[Clock] = SystemClock()
"""Default clock shared by schedulers that are not given one explicitly."""


@dataclass
class FakeClock:
    """Manually advanced clock for deterministic tests.

    Monotonic and wall-clock time move together. ``sleep`` advances time
    instantly instead of blocking.

    Thread-safety:
        All operations are guarded by an internal lock.
    """

    _monotonic: float = 0.0
    _wall: datetime = field(default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def monotonic(self) -> float:
        with self._lock:
            return self._monotonic

    def utcnow(self) -> datetime:
        with self._lock:
            return self._wall

    def sleep(self, seconds: float) -> None:
        self.advance(seconds)

    def advance(self, seconds: float) -> None:
        """Move both clocks forward by ``seconds``.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            msg = "Cannot advance time by negative seconds"
            raise ValueError(msg)
        with self._lock:
            self._monotonic += seconds
            self._wall += timedelta(seconds=seconds)


__all__ = [
    "SYSTEM_CLOCK",
    "Clock",
    "FakeClock",
    "MonotonicClock",
    "SystemClock",
    "WallClock",
]
