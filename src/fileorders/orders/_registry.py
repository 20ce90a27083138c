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

"""Registry of orders that were admitted but not yet dispatched."""

from __future__ import annotations

from threading import RLock

from ..errors import DuplicateOrderError
from ._types import Order


class PendingRegistry:
    """Insertion-ordered collection of outstanding orders keyed by id.

    An order is present from admission until the scheduler takes it for
    dispatch. Taking is destructive: each order can be taken once, and a
    later ``take`` for the same id returns ``None`` exactly as if the id
    had never been pushed.

    Thread Safety:
        Every method is atomic under an internal lock.
    """

    __slots__ = ("_lock", "_orders")

    def __init__(self) -> None:
        super().__init__()
        self._orders: dict[str, Order] = {}
        self._lock = RLock()

    def push(self, order: Order) -> None:
        """Append ``order``.

        Raises:
            DuplicateOrderError: If an order with the same id is still pending.
        """
        with self._lock:
            if order.id in self._orders:
                raise DuplicateOrderError(f"Order {order.id} is already pending")
            self._orders[order.id] = order

    def take(self, order_id: str) -> Order | None:
        """Remove and return the order with ``order_id``, or ``None``."""
        with self._lock:
            return self._orders.pop(order_id, None)

    def peek(self, order_id: str) -> Order | None:
        """Return the order with ``order_id`` without removing it."""
        with self._lock:
            return self._orders.get(order_id)

    def size(self) -> int:
        with self._lock:
            return len(self._orders)

    def clear(self) -> list[Order]:
        """Remove every pending order and return them in insertion order."""
        with self._lock:
            removed = list(self._orders.values())
            self._orders.clear()
            return removed

    def orders(self) -> tuple[Order, ...]:
        """Snapshot of pending orders in insertion order."""
        with self._lock:
            return tuple(self._orders.values())

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, order_id: object) -> bool:
        with self._lock:
            return order_id in self._orders


__all__ = ["PendingRegistry"]
