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

"""Tests for PendingRegistry and PathLock."""

from __future__ import annotations

import threading

import pytest
from hypothesis import given, strategies as st

from fileorders.errors import DuplicateOrderError, PathNotLockedError
from fileorders.orders import OrderKind, PathLock, PendingRegistry, new_order


class TestPendingRegistry:
    """Tests for PendingRegistry."""

    def test_push_then_take(self) -> None:
        registry = PendingRegistry()
        order = new_order("a.txt", OrderKind.WRITE, b"x")
        registry.push(order)

        assert order.id in registry
        assert registry.take(order.id) is order
        assert order.id not in registry

    def test_take_is_destructive(self) -> None:
        registry = PendingRegistry()
        order = new_order("a.txt", OrderKind.READ)
        registry.push(order)

        assert registry.take(order.id) is order
        assert registry.take(order.id) is None

    def test_take_unknown_returns_none(self) -> None:
        assert PendingRegistry().take("missing") is None

    def test_peek_does_not_remove(self) -> None:
        registry = PendingRegistry()
        order = new_order("a.txt", OrderKind.READ)
        registry.push(order)

        assert registry.peek(order.id) is order
        assert registry.size() == 1

    def test_size_tracks_pushes_and_takes(self) -> None:
        registry = PendingRegistry()
        orders = [new_order(f"{i}.txt", OrderKind.READ) for i in range(3)]
        for order in orders:
            registry.push(order)
        assert registry.size() == 3
        assert len(registry) == 3

        _ = registry.take(orders[1].id)
        assert registry.size() == 2

    def test_duplicate_push_rejected(self) -> None:
        registry = PendingRegistry()
        order = new_order("a.txt", OrderKind.READ)
        registry.push(order)

        with pytest.raises(DuplicateOrderError):
            registry.push(order)

    def test_orders_keep_insertion_order(self) -> None:
        registry = PendingRegistry()
        orders = [new_order(f"{i}.txt", OrderKind.READ) for i in range(5)]
        for order in orders:
            registry.push(order)

        assert registry.orders() == tuple(orders)

    def test_clear_returns_removed(self) -> None:
        registry = PendingRegistry()
        orders = [new_order(f"{i}.txt", OrderKind.READ) for i in range(2)]
        for order in orders:
            registry.push(order)

        assert registry.clear() == orders
        assert registry.size() == 0

    def test_concurrent_take_yields_each_order_once(self) -> None:
        registry = PendingRegistry()
        order = new_order("a.txt", OrderKind.WRITE, b"x")
        registry.push(order)
        results: list[object] = []
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            results.append(registry.take(order.id))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(order) == 1
        assert results.count(None) == 7

    @given(st.lists(st.tuples(st.booleans(), st.integers(min_value=0, max_value=7))))
    def test_matches_dict_model(self, steps: list[tuple[bool, int]]) -> None:
        """Pushes and takes agree with a plain dict keyed by slot."""
        registry = PendingRegistry()
        model: dict[int, str] = {}
        orders = [new_order(f"{slot}.txt", OrderKind.APPEND, b"x") for slot in range(8)]

        for is_push, slot in steps:
            order = orders[slot]
            if is_push:
                if slot in model:
                    with pytest.raises(DuplicateOrderError):
                        registry.push(order)
                else:
                    registry.push(order)
                    model[slot] = order.id
            else:
                taken = registry.take(order.id)
                assert (taken is order) == (model.pop(slot, None) is not None)

        assert registry.size() == len(model)
        assert [order.id for order in registry.orders()] == list(model.values())


class TestPathLock:
    """Tests for PathLock."""

    def test_acquire_and_release(self) -> None:
        locks = PathLock()
        assert locks.try_acquire("a.txt")
        assert locks.is_locked("a.txt")

        locks.release("a.txt")
        assert not locks.is_locked("a.txt")

    def test_second_acquire_fails(self) -> None:
        locks = PathLock()
        assert locks.try_acquire("a.txt")
        assert not locks.try_acquire("a.txt")

    def test_paths_are_independent(self) -> None:
        locks = PathLock()
        assert locks.try_acquire("a.txt")
        assert locks.try_acquire("b.txt")
        assert locks.held() == frozenset({"a.txt", "b.txt"})
        assert len(locks) == 2

    def test_reacquire_after_release(self) -> None:
        locks = PathLock()
        assert locks.try_acquire("a.txt")
        locks.release("a.txt")
        assert locks.try_acquire("a.txt")

    def test_release_unheld_path_raises(self) -> None:
        with pytest.raises(PathNotLockedError, match="not locked"):
            PathLock().release("a.txt")

    def test_paths_compared_verbatim(self) -> None:
        locks = PathLock()
        assert locks.try_acquire("dir/a.txt")
        assert locks.try_acquire("dir//a.txt")

    def test_only_one_thread_wins(self) -> None:
        locks = PathLock()
        wins: list[bool] = []
        barrier = threading.Barrier(16)

        def worker() -> None:
            barrier.wait()
            wins.append(locks.try_acquire("shared"))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert wins.count(True) == 1
