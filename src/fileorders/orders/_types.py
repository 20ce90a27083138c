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

"""Order values and completion events.

All types are frozen dataclasses. Orders compare and hash by id only, so
two orders with identical path, kind and payload are still distinct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Final
from uuid import uuid4

from ..errors import InvalidKindError

Payload = str | bytes | bytearray | memoryview


class OrderKind(StrEnum):
    """Operations a caller can request."""

    READ = "read"
    WRITE = "write"
    CREATE = "create"
    DELETE = "delete"
    APPEND = "append"

    @property
    def carries_payload(self) -> bool:
        """True for kinds whose payload is written to the backend."""
        return self in _PAYLOAD_KINDS


_PAYLOAD_KINDS: Final[frozenset[OrderKind]] = frozenset(
    {OrderKind.WRITE, OrderKind.CREATE, OrderKind.APPEND}
)


def coerce_kind(kind: OrderKind | str) -> OrderKind:
    """Return the :class:`OrderKind` for ``kind``.

    Raises:
        InvalidKindError: If ``kind`` is not one of the supported kinds.
    """
    if isinstance(kind, OrderKind):
        return kind
    try:
        return OrderKind(kind)
    except ValueError:
        allowed = ", ".join(member.value for member in OrderKind)
        msg = f"Order kind must be one of {allowed}; got {kind!r}"
        raise InvalidKindError(msg) from None


def encode_payload(payload: Payload) -> bytes:
    """Encode text as UTF-8 and copy buffers into immutable bytes."""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


@dataclass(slots=True, frozen=True)
class Order:
    """One requested file operation.

    Attributes:
        id: Unique token generated when the order is admitted.
        path: Target path, passed to the backend unchanged.
        kind: Requested operation.
        payload: Bytes to write; empty for reads and deletes.
        submitted_at: UTC time of admission.
    """

    id: str
    path: str = field(compare=False)
    kind: OrderKind = field(compare=False)
    payload: bytes = field(default=b"", compare=False, repr=False)
    submitted_at: datetime = field(
        default_factory=lambda: datetime.now(UTC), compare=False
    )

    def as_dict(self) -> dict[str, str]:
        """Return a JSON-friendly view of the request (payload as UTF-8 text)."""
        return {
            "path": self.path,
            "kind": self.kind.value,
            "payload": self.payload.decode("utf-8", errors="replace"),
        }


def new_order(
    path: str,
    kind: OrderKind | str,
    payload: Payload = b"",
    *,
    submitted_at: datetime | None = None,
) -> Order:
    """Build an :class:`Order` with a fresh id.

    ``path`` is not validated; an empty path reaches the backend as is.
    Payloads of reads and deletes are discarded.

    Raises:
        InvalidKindError: If ``kind`` is not a supported operation.
    """
    resolved = coerce_kind(kind)
    data = encode_payload(payload) if resolved.carries_payload else b""
    return Order(
        id=uuid4().hex,
        path=path,
        kind=resolved,
        payload=data,
        submitted_at=submitted_at if submitted_at is not None else datetime.now(UTC),
    )


@dataclass(slots=True, frozen=True)
class OrderReceipt:
    """Acknowledgement returned for completed writes, creates, deletes and appends."""

    order_id: str
    path: str
    kind: OrderKind
    completed_at: datetime


@dataclass(slots=True, frozen=True)
class OrderCompleted:
    """Published when the backend call for ``order`` succeeded.

    ``content`` holds the bytes read for READ orders and is ``None`` otherwise.
    """

    order: Order
    content: bytes | None = None

    @property
    def kind(self) -> OrderKind:
        return self.order.kind


@dataclass(slots=True, frozen=True)
class OrderFailed:
    """Published when the backend call for ``order`` raised."""

    order: Order
    error: BaseException

    @property
    def kind(self) -> OrderKind:
        return self.order.kind


CompletionEvent = OrderCompleted | OrderFailed


__all__ = [
    "CompletionEvent",
    "Order",
    "OrderCompleted",
    "OrderFailed",
    "OrderKind",
    "OrderReceipt",
    "Payload",
    "coerce_kind",
    "encode_payload",
    "new_order",
]
