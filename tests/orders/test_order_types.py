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

"""Tests for order values and kind coercion."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from hypothesis import given, strategies as st

from fileorders.errors import FileOrdersError, InvalidKindError
from fileorders.orders import (
    Order,
    OrderCompleted,
    OrderFailed,
    OrderKind,
    coerce_kind,
    encode_payload,
    new_order,
)

_KIND_VALUES = {kind.value for kind in OrderKind}


class TestOrderKind:
    """Tests for OrderKind and coerce_kind."""

    @pytest.mark.parametrize("value", ["read", "write", "create", "delete", "append"])
    def test_coerce_accepts_every_value(self, value: str) -> None:
        assert coerce_kind(value).value == value

    def test_coerce_passes_members_through(self) -> None:
        assert coerce_kind(OrderKind.APPEND) is OrderKind.APPEND

    @given(st.text().filter(lambda text: text not in _KIND_VALUES))
    def test_coerce_rejects_unknown_kinds(self, value: str) -> None:
        with pytest.raises(InvalidKindError):
            coerce_kind(value)

    def test_invalid_kind_is_a_value_error(self) -> None:
        with pytest.raises(ValueError, match="must be one of"):
            coerce_kind("rename")
        assert issubclass(InvalidKindError, FileOrdersError)

    def test_kind_is_case_sensitive(self) -> None:
        with pytest.raises(InvalidKindError):
            coerce_kind("READ")

    def test_carries_payload(self) -> None:
        carrying = {kind for kind in OrderKind if kind.carries_payload}
        assert carrying == {OrderKind.WRITE, OrderKind.CREATE, OrderKind.APPEND}


class TestNewOrder:
    """Tests for new_order."""

    def test_ids_are_unique(self) -> None:
        ids = {new_order("a.txt", "write", b"x").id for _ in range(100)}
        assert len(ids) == 100

    def test_identical_requests_are_distinct_orders(self) -> None:
        first = new_order("a.txt", OrderKind.WRITE, b"x")
        second = new_order("a.txt", OrderKind.WRITE, b"x")
        assert first != second
        assert len({first, second}) == 2

    def test_orders_compare_by_id(self) -> None:
        order = new_order("a.txt", OrderKind.WRITE, b"x")
        clone = Order(id=order.id, path="other.txt", kind=OrderKind.READ)
        assert order == clone

    def test_text_payload_is_utf8_encoded(self) -> None:
        order = new_order("a.txt", "append", "héllo")
        assert order.payload == "héllo".encode()

    @pytest.mark.parametrize("kind", [OrderKind.READ, OrderKind.DELETE])
    def test_payload_discarded_for_reads_and_deletes(self, kind: OrderKind) -> None:
        assert new_order("a.txt", kind, b"ignored").payload == b""

    def test_empty_path_is_accepted(self) -> None:
        assert new_order("", OrderKind.READ).path == ""

    def test_submitted_at_can_be_supplied(self) -> None:
        stamp = datetime(2030, 5, 1, tzinfo=UTC)
        assert new_order("a", "read", submitted_at=stamp).submitted_at == stamp

    def test_submitted_at_defaults_to_now(self) -> None:
        before = datetime.now(UTC)
        order = new_order("a", "read")
        assert before <= order.submitted_at <= datetime.now(UTC)

    def test_invalid_kind_raises(self) -> None:
        with pytest.raises(InvalidKindError):
            new_order("a.txt", "truncate")

    def test_as_dict(self) -> None:
        order = new_order("notes.txt", "write", b"hi")
        assert order.as_dict() == {"path": "notes.txt", "kind": "write", "payload": "hi"}

    def test_orders_are_frozen(self) -> None:
        order = new_order("a.txt", "read")
        with pytest.raises(AttributeError):
            order.path = "b.txt"  # type: ignore[misc]


class TestPayloadEncoding:
    """Tests for encode_payload."""

    @given(st.binary())
    def test_bytes_like_inputs_copy_to_bytes(self, data: bytes) -> None:
        assert encode_payload(bytearray(data)) == data
        assert encode_payload(memoryview(data)) == data

    @given(st.text())
    def test_text_encodes_as_utf8(self, text: str) -> None:
        assert encode_payload(text) == text.encode("utf-8")


class TestCompletionEvents:
    """Tests for completion event types."""

    def test_events_expose_order_kind(self) -> None:
        order = new_order("a.txt", "read")
        assert OrderCompleted(order=order, content=b"x").kind is OrderKind.READ
        assert OrderFailed(order=order, error=OSError()).kind is OrderKind.READ
