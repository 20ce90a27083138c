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

"""Scheduler that admits, serializes and dispatches file orders.

Each public operation returns a :class:`concurrent.futures.Future` right
away. Behind it the order moves through::

    Submitted -> (admission deferred <-> retry) -> Queued
              -> (path locked <-> retry) -> Executing -> Completed | Failed

Admission is limited per kind by ``SchedulerConfig.max_concurrent``. A
submission over the limit is retried after ``retry_delay_ms``; nothing is
enqueued until it is admitted. A queued order whose path is held by another
order is likewise retried after ``retry_delay_ms``. Retries race: when
several orders wait on one path, whichever retry fires first after the path
is released wins it.

Example::

    with Scheduler(HostFileBackend(_root="/srv/data")) as scheduler:
        scheduler.write("greeting.txt", "hello").result()
        assert scheduler.read("greeting.txt").result() == b"hello"
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from threading import RLock
from typing import Any, assert_never

from ..clock import SYSTEM_CLOCK, Clock
from ..config import SchedulerConfig
from ..errors import OrderIOError, SchedulerClosedError, UnexpectedDispatchError
from ..filesystem import FileBackend, HostFileBackend
from ..logging import StructuredLogger, get_logger
from ..threading import Executor, SystemExecutor, SystemTimerQueue, TimerQueue
from ._completion import CompletionBus
from ._path_lock import PathLock
from ._registry import PendingRegistry
from ._types import (
    Order,
    OrderKind,
    OrderReceipt,
    Payload,
    coerce_kind,
    encode_payload,
    new_order,
)

logger: StructuredLogger = get_logger(__name__, context={"component": "scheduler"})


@dataclass(slots=True, frozen=True)
class SchedulerStats:
    """Point-in-time view of scheduler state.

    Attributes:
        pending: Admitted orders waiting for their path.
        deferred: Submissions waiting for admission.
        in_flight: Outstanding admitted orders per kind.
        locked_paths: Paths with a backend call in progress.
    """

    pending: int
    deferred: int
    in_flight: dict[OrderKind, int]
    locked_paths: frozenset[str]


class Scheduler:
    """Runs file orders against a backend with per-path mutual exclusion.

    Args:
        backend: Filesystem primitives to dispatch to. Defaults to an
            unrooted :class:`HostFileBackend`.
        config: Admission ceiling, retry delay and worker count.
        executor: Where backend calls run. Defaults to a thread pool sized
            by ``config.max_workers``.
        timers: Delay queue for retries. Defaults to a
            :class:`SystemTimerQueue` on ``clock``.
        clock: Source of submission and completion timestamps.
        bus: Completion bus, exposed so observers can be attached.

    Thread Safety:
        All public methods may be called from any thread. Registry, path
        lock and admission bookkeeping change only under one reentrant
        lock; caller futures and listeners are resolved outside it.
    """

    def __init__(
        self,
        backend: FileBackend | None = None,
        *,
        config: SchedulerConfig | None = None,
        executor: Executor | None = None,
        timers: TimerQueue | None = None,
        clock: Clock = SYSTEM_CLOCK,
        bus: CompletionBus | None = None,
    ) -> None:
        super().__init__()
        self._backend: FileBackend = backend if backend is not None else HostFileBackend()
        self._config = config if config is not None else SchedulerConfig()
        self._clock = clock
        self._executor: Executor = (
            executor
            if executor is not None
            else SystemExecutor(max_workers=self._config.max_workers)
        )
        self._timers: TimerQueue = (
            timers if timers is not None else SystemTimerQueue(clock=clock)
        )
        self._bus = bus if bus is not None else CompletionBus()
        self._registry = PendingRegistry()
        self._path_lock = PathLock()
        self._deferred: set[Future[Any]] = set()
        self._lock = RLock()
        self._closed = False

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def bus(self) -> CompletionBus:
        return self._bus

    @property
    def registry(self) -> PendingRegistry:
        return self._registry

    @property
    def path_lock(self) -> PathLock:
        return self._path_lock

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    # --- Public operations ---

    def read(self, path: str) -> Future[bytes]:
        """Schedule a read; the future resolves to the file content."""
        return self.submit(path, OrderKind.READ)

    def write(self, path: str, content: Payload) -> Future[OrderReceipt]:
        """Schedule replacing the content of ``path``."""
        return self.submit(path, OrderKind.WRITE, content)

    def create(self, path: str, content: Payload = b"") -> Future[OrderReceipt]:
        """Schedule creating ``path``, optionally with initial content."""
        return self.submit(path, OrderKind.CREATE, content)

    def delete(self, path: str) -> Future[OrderReceipt]:
        """Schedule removing the file at ``path``."""
        return self.submit(path, OrderKind.DELETE)

    def append(self, path: str, content: Payload) -> Future[OrderReceipt]:
        """Schedule appending ``content`` to ``path``."""
        return self.submit(path, OrderKind.APPEND, content)

    def submit(
        self,
        path: str,
        kind: OrderKind | str,
        payload: Payload = b"",
    ) -> Future[Any]:
        """Schedule an order of any kind.

        Returns:
            A future resolving to ``bytes`` for reads and an
            :class:`OrderReceipt` otherwise. It fails with
            :class:`OrderIOError` when the backend call fails.

        Raises:
            InvalidKindError: If ``kind`` is not a supported operation.
            SchedulerClosedError: If the scheduler has been closed.
        """
        resolved = coerce_kind(kind)
        data = encode_payload(payload) if resolved.carries_payload else b""
        future: Future[Any] = Future()
        _ = future.set_running_or_notify_cancel()
        with self._lock:
            if self._closed:
                msg = "Scheduler has been closed"
                raise SchedulerClosedError(msg)
        self._admit(path, resolved, data, future)
        return future

    def stats(self) -> SchedulerStats:
        with self._lock:
            return SchedulerStats(
                pending=self._registry.size(),
                deferred=len(self._deferred),
                in_flight=self._bus.pending_by_kind(),
                locked_paths=self._path_lock.held(),
            )

    def close(self, *, wait: bool = True) -> None:
        """Stop retries and dispatch, failing orders that have not run.

        With ``wait=True`` backend calls already executing are allowed to
        finish and resolve normally. Orders still waiting for admission or
        for their path fail with :class:`SchedulerClosedError`.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # Left populated: admission retries racing with close check it.
            deferred = list(self._deferred)
            dropped = self._registry.clear()

        try:
            self._timers.close(wait=wait)
            self._executor.shutdown(wait=wait)
        finally:
            error = SchedulerClosedError("Scheduler was closed before the order ran")
            failed = self._bus.fail_all(error)
            for future in deferred:
                future.set_exception(error)

            logger.info(
                "Scheduler closed.",
                event="scheduler.closed",
                context={
                    "dropped_orders": len(dropped),
                    "failed_subscribers": failed,
                    "deferred_submissions": len(deferred),
                },
            )

    def __enter__(self) -> Scheduler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close(wait=True)

    # --- Admission and dispatch ---

    def _admit(
        self,
        path: str,
        kind: OrderKind,
        payload: bytes,
        future: Future[Any],
    ) -> None:
        with self._lock:
            if self._closed:
                # Deferred futures are failed by close itself.
                orphaned = future not in self._deferred
                order = None
            else:
                orphaned = False
                order = self._admit_locked(path, kind, payload, future)

        if orphaned:
            future.set_exception(
                SchedulerClosedError("Scheduler was closed before the order ran")
            )
        if order is None:
            return
        logger.debug(
            "Order admitted.",
            event="order.admitted",
            context=_order_context(order),
        )
        self._try_execute(order.id)

    def _admit_locked(
        self,
        path: str,
        kind: OrderKind,
        payload: bytes,
        future: Future[Any],
    ) -> Order | None:
        """Admit or defer a submission; returns the order once admitted."""
        in_flight = self._bus.pending(kind)
        if in_flight >= self._config.max_concurrent:
            self._deferred.add(future)
            self._timers.call_later(
                self._config.retry_delay,
                lambda: self._admit(path, kind, payload, future),
            )
            logger.debug(
                "Admission deferred at concurrency ceiling.",
                event="order.admission_deferred",
                context={"path": path, "kind": kind.value, "in_flight": in_flight},
            )
            return None

        self._deferred.discard(future)
        order = new_order(path, kind, payload, submitted_at=self._clock.utcnow())
        _ = self._bus.subscribe(order.id, kind, future)
        self._registry.push(order)
        return order

    def _try_execute(self, order_id: str) -> None:
        with self._lock:
            if self._closed:
                return
            order = self._registry.peek(order_id)
            if order is None:
                logger.debug(
                    "Order already serviced.",
                    event="order.vanished",
                    context={"order_id": order_id},
                )
                return
            if not self._path_lock.try_acquire(order.path):
                self._timers.call_later(
                    self._config.retry_delay,
                    lambda: self._try_execute(order_id),
                )
                logger.debug(
                    "Path busy, retrying later.",
                    event="order.lock_contended",
                    context=_order_context(order),
                )
                return
            _ = self._registry.take(order_id)

        logger.debug(
            "Order dispatched.",
            event="order.dispatched",
            context=_order_context(order),
        )
        try:
            _ = self._executor.submit(lambda: self._dispatch(order))
        except RuntimeError:
            # Executor shut down between the closed check and submission.
            self._path_lock.release(order.path)
            _ = self._bus.notify_error(
                order, SchedulerClosedError("Scheduler was closed before the order ran")
            )

    def _dispatch(self, order: Order) -> None:
        failure: BaseException | None = None
        outcome: object = None
        try:
            outcome = self._perform(order)
        except OSError as error:
            failure = OrderIOError(
                f"{order.kind.value} of {order.path!r} failed: {error}",
                order_id=order.id,
                path=order.path,
                kind=order.kind.value,
                error=error,
            )
            logger.warning(
                "Order failed.",
                event="order.failed",
                context={**_order_context(order), "error": repr(error)},
            )
        except Exception as error:
            failure = UnexpectedDispatchError(
                f"{order.kind.value} of {order.path!r} raised {type(error).__name__}",
                order_id=order.id,
                path=order.path,
                kind=order.kind.value,
            )
            failure.__cause__ = error
            logger.exception(
                "Order dispatch raised unexpectedly.",
                event="order.unexpected_failure",
                context=_order_context(order),
            )
        finally:
            self._path_lock.release(order.path)

        if failure is not None:
            _ = self._bus.notify_error(order, failure)
            return
        logger.debug(
            "Order completed.",
            event="order.completed",
            context=_order_context(order),
        )
        _ = self._bus.notify(order, outcome)

    def _perform(self, order: Order) -> bytes | OrderReceipt:
        match order.kind:
            case OrderKind.READ:
                return self._backend.read_bytes(order.path)
            case OrderKind.WRITE | OrderKind.CREATE:
                _ = self._backend.write_bytes(order.path, order.payload)
            case OrderKind.APPEND:
                _ = self._backend.append_bytes(order.path, order.payload)
            case OrderKind.DELETE:
                self._backend.delete_entry(order.path)
            case _ as unreachable:  # pragma: no cover - exhaustiveness sentinel
                assert_never(unreachable)
        return OrderReceipt(
            order_id=order.id,
            path=order.path,
            kind=order.kind,
            completed_at=self._clock.utcnow(),
        )


def _order_context(order: Order) -> dict[str, object]:
    return {"order_id": order.id, "path": order.path, "kind": order.kind.value}


__all__ = [
    "Scheduler",
    "SchedulerStats",
]
