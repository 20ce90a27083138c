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

"""Order values, bookkeeping and the scheduler that runs them."""

from __future__ import annotations

from ._completion import CompletionBus, CompletionListener, ListenerFailure
from ._path_lock import PathLock
from ._registry import PendingRegistry
from ._scheduler import Scheduler, SchedulerStats
from ._types import (
    CompletionEvent,
    Order,
    OrderCompleted,
    OrderFailed,
    OrderKind,
    OrderReceipt,
    Payload,
    coerce_kind,
    encode_payload,
    new_order,
)

__all__ = [
    "CompletionBus",
    "CompletionEvent",
    "CompletionListener",
    "ListenerFailure",
    "Order",
    "OrderCompleted",
    "OrderFailed",
    "OrderKind",
    "OrderReceipt",
    "PathLock",
    "Payload",
    "PendingRegistry",
    "Scheduler",
    "SchedulerStats",
    "coerce_kind",
    "encode_payload",
    "new_order",
]
