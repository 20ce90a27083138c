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

"""Injectable execution and delay primitives for the order scheduler.

- **Execution**: where backend calls run (:class:`SystemExecutor`,
  :class:`FakeExecutor`, :class:`ManualExecutor`).
- **Delay**: when admission and path-lock retries fire
  (:class:`SystemTimerQueue`, :class:`FakeTimerQueue`).

Example (testing)::

    from fileorders.clock import FakeClock
    from fileorders.threading import FakeTimerQueue, ManualExecutor

    clock = FakeClock()
    timers = FakeTimerQueue(clock=clock)
    executor = ManualExecutor()
"""

from __future__ import annotations

from fileorders.threading._executor import (
    CompletedFuture,
    FakeExecutor,
    ManualExecutor,
    SystemExecutor,
)
from fileorders.threading._timers import FakeTimerQueue, SystemTimerQueue
from fileorders.threading._types import Executor, Future, TimerQueue
from fileorders.threading._worker import BackgroundWorker

__all__ = [
    "BackgroundWorker",
    "CompletedFuture",
    "Executor",
    "FakeExecutor",
    "FakeTimerQueue",
    "Future",
    "ManualExecutor",
    "SystemExecutor",
    "SystemTimerQueue",
    "TimerQueue",
]
