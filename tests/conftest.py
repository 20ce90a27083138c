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

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

import pytest

from fileorders.clock import FakeClock
from fileorders.config import SchedulerConfig
from fileorders.filesystem import InMemoryFileBackend
from fileorders.orders import Scheduler
from fileorders.threading import Executor, FakeTimerQueue, ManualExecutor


class SchedulerFactory(Protocol):
    def __call__(
        self,
        *,
        config: SchedulerConfig | None = None,
        executor: Executor | None = None,
    ) -> Scheduler:
        """Return a scheduler wired to the shared fakes."""


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timers(clock: FakeClock) -> FakeTimerQueue:
    return FakeTimerQueue(clock=clock)


@pytest.fixture
def executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def backend() -> InMemoryFileBackend:
    return InMemoryFileBackend()


@pytest.fixture
def scheduler_factory(
    clock: FakeClock,
    timers: FakeTimerQueue,
    executor: ManualExecutor,
    backend: InMemoryFileBackend,
) -> Iterator[SchedulerFactory]:
    """Build schedulers on the in-memory backend, closing them afterwards.

    Work is held by the manual executor and retries fire only when the
    fake timer queue is advanced.
    """
    created: list[Scheduler] = []
    default_executor = executor

    def factory(
        *,
        config: SchedulerConfig | None = None,
        executor: Executor | None = None,
    ) -> Scheduler:
        chosen = executor if executor is not None else default_executor
        scheduler = Scheduler(
            backend,
            config=config,
            executor=chosen,
            timers=timers,
            clock=clock,
        )
        created.append(scheduler)
        return scheduler

    yield factory
    for scheduler in created:
        scheduler.close(wait=False)


@pytest.fixture
def scheduler(scheduler_factory: SchedulerFactory) -> Scheduler:
    return scheduler_factory()
