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

"""In-process scheduler for file read, write, create, delete and append orders.

Orders on the same path never overlap; orders on different paths run
concurrently on an executor. Each operation returns a
:class:`concurrent.futures.Future` for its result.
"""

from __future__ import annotations

from .clock import SYSTEM_CLOCK, Clock, FakeClock, SystemClock
from .config import DEFAULT_MAX_CONCURRENT, DEFAULT_RETRY_DELAY_MS, SchedulerConfig
from .errors import (
    DuplicateOrderError,
    FileOrdersError,
    InvalidKindError,
    OrderIOError,
    PathNotLockedError,
    SchedulerClosedError,
    UnexpectedDispatchError,
)
from .filesystem import FileBackend, HostFileBackend, InMemoryFileBackend
from .logging import StructuredLogger, configure_logging, get_logger
from .orders import (
    CompletionBus,
    CompletionEvent,
    Order,
    OrderCompleted,
    OrderFailed,
    OrderKind,
    OrderReceipt,
    PathLock,
    PendingRegistry,
    Scheduler,
    SchedulerStats,
    new_order,
)

__all__ = [
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_RETRY_DELAY_MS",
    "SYSTEM_CLOCK",
    "Clock",
    "CompletionBus",
    "CompletionEvent",
    "DuplicateOrderError",
    "FakeClock",
    "FileBackend",
    "FileOrdersError",
    "HostFileBackend",
    "InMemoryFileBackend",
    "InvalidKindError",
    "Order",
    "OrderCompleted",
    "OrderFailed",
    "OrderIOError",
    "OrderKind",
    "OrderReceipt",
    "PathLock",
    "PathNotLockedError",
    "PendingRegistry",
    "Scheduler",
    "SchedulerClosedError",
    "SchedulerConfig",
    "SchedulerStats",
    "StructuredLogger",
    "SystemClock",
    "UnexpectedDispatchError",
    "configure_logging",
    "get_logger",
    "new_order",
]
