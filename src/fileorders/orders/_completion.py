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

"""Per-order result delivery from the scheduler back to the caller."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from threading import RLock
from typing import Any

from ..errors import DuplicateOrderError
from ..logging import StructuredLogger, get_logger
from ._types import CompletionEvent, Order, OrderCompleted, OrderFailed, OrderKind

CompletionListener = Callable[[CompletionEvent], None]

logger: StructuredLogger = get_logger(__name__, context={"component": "completion_bus"})


@dataclass(slots=True, frozen=True)
class ListenerFailure:
    """A listener that raised while an event was being published."""

    listener: CompletionListener
    error: Exception


@dataclass(slots=True, frozen=True)
class _Subscription:
    kind: OrderKind
    future: Future[Any]


def _describe_listener(listener: CompletionListener) -> str:
    qualname = getattr(listener, "__qualname__", None)
    if isinstance(qualname, str):
        module_name = getattr(listener, "__module__", None)
        prefix = f"{module_name}." if isinstance(module_name, str) else ""
        return f"{prefix}{qualname}"
    return repr(listener)


class CompletionBus:
    """Routes each order's outcome to the one future waiting on its id.

    A subscription is registered when an order is admitted and consumed by
    the first :meth:`notify` or :meth:`notify_error` for that id, so every
    caller is resolved exactly once and never sees another order's result.
    Outstanding subscriptions are what the scheduler counts against its
    per-kind admission ceiling.

    Listeners added with :meth:`add_listener` additionally observe every
    :class:`OrderCompleted` and :class:`OrderFailed` event. They run after
    the caller's future is resolved; a failing listener is logged and does
    not affect the caller or the other listeners.

    Futures are resolved, and listeners invoked, outside the bus lock.
    """

    def __init__(self) -> None:
        super().__init__()
        self._subscriptions: dict[str, _Subscription] = {}
        self._counts: Counter[OrderKind] = Counter()
        self._listeners: list[CompletionListener] = []
        self._lock = RLock()

    def subscribe(
        self,
        order_id: str,
        kind: OrderKind,
        future: Future[Any] | None = None,
    ) -> Future[Any]:
        """Register interest in ``order_id`` and return the future to wait on.

        A caller-created future is reused; it is moved to the running state
        so callers cannot cancel it.

        Raises:
            DuplicateOrderError: If ``order_id`` already has a subscription.
        """
        target: Future[Any] = future if future is not None else Future()
        if not target.running() and not target.done():
            _ = target.set_running_or_notify_cancel()
        with self._lock:
            if order_id in self._subscriptions:
                raise DuplicateOrderError(f"Order {order_id} already has a subscriber")
            self._subscriptions[order_id] = _Subscription(kind=kind, future=target)
            self._counts[kind] += 1
        return target

    def pending(self, kind: OrderKind | None = None) -> int:
        """Outstanding subscriptions, overall or for one ``kind``."""
        with self._lock:
            if kind is None:
                return len(self._subscriptions)
            return self._counts[kind]

    def pending_by_kind(self) -> dict[OrderKind, int]:
        with self._lock:
            return {kind: count for kind, count in self._counts.items() if count}

    def is_subscribed(self, order_id: str) -> bool:
        with self._lock:
            return order_id in self._subscriptions

    def notify(self, order: Order, result: object) -> tuple[ListenerFailure, ...]:
        """Resolve the subscriber of ``order`` with ``result`` and publish.

        The published :class:`OrderCompleted` carries ``result`` as content
        for READ orders.
        """
        subscription = self._consume(order)
        if subscription is not None:
            subscription.future.set_result(result)
        content = result if order.kind is OrderKind.READ and isinstance(result, bytes) else None
        return self._publish(OrderCompleted(order=order, content=content))

    def notify_error(
        self, order: Order, error: BaseException
    ) -> tuple[ListenerFailure, ...]:
        """Fail the subscriber of ``order`` with ``error`` and publish."""
        subscription = self._consume(order)
        if subscription is not None:
            subscription.future.set_exception(error)
        return self._publish(OrderFailed(order=order, error=error))

    def fail_all(self, error: BaseException) -> int:
        """Fail every outstanding subscriber with ``error``.

        Returns:
            Number of subscribers failed.
        """
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
            self._counts.clear()
        for subscription in subscriptions:
            subscription.future.set_exception(error)
        return len(subscriptions)

    def add_listener(self, listener: CompletionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: CompletionListener) -> bool:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return False
            return True

    def _consume(self, order: Order) -> _Subscription | None:
        with self._lock:
            subscription = self._subscriptions.pop(order.id, None)
            if subscription is not None:
                self._counts[subscription.kind] -= 1
                return subscription
        logger.warning(
            "Completion for an order without subscriber.",
            event="completion.unmatched",
            context={"order_id": order.id, "path": order.path, "kind": order.kind.value},
        )
        return None

    def _publish(self, event: CompletionEvent) -> tuple[ListenerFailure, ...]:
        with self._lock:
            listeners = tuple(self._listeners)
        failures: list[ListenerFailure] = []
        for listener in listeners:
            try:
                listener(event)
            except Exception as error:
                logger.exception(
                    "Completion listener failed.",
                    event="completion.listener_failed",
                    context={
                        "listener": _describe_listener(listener),
                        "order_id": event.order.id,
                        "event_type": type(event).__name__,
                    },
                )
                failures.append(ListenerFailure(listener=listener, error=error))
        return tuple(failures)


__all__ = [
    "CompletionBus",
    "CompletionListener",
    "ListenerFailure",
]
