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

"""Backend protocol the scheduler dispatches orders to.

The scheduler owns ordering and mutual exclusion; a backend only performs
one primitive call at a time per path and reports failure by raising
:class:`OSError` (or one of its subclasses). Any other exception type is
treated by the scheduler as a defect and surfaced as
:class:`~fileorders.errors.UnexpectedDispatchError`.

Implementations:

- ``HostFileBackend``: files on the host, optionally confined to a root
- ``InMemoryFileBackend``: process-local dictionary, for tests and tools
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class FileBackend(Protocol):
    """Primitive file operations used by :class:`~fileorders.orders.Scheduler`.

    Example::

        def copy(backend: FileBackend, source: str, target: str) -> None:
            backend.write_bytes(target, backend.read_bytes(source))
    """

    def read_bytes(self, path: str) -> bytes:
        """Return the full content of ``path``.

        Raises:
            FileNotFoundError: Path does not exist.
            IsADirectoryError: Path is a directory.
            PermissionError: Access denied or path outside the backend root.
        """
        ...

    def write_bytes(self, path: str, data: bytes) -> int:
        """Replace the content of ``path`` with ``data``, creating it if needed.

        Returns:
            Number of bytes written.
        """
        ...

    def append_bytes(self, path: str, data: bytes) -> int:
        """Append ``data`` to ``path``, creating it if needed.

        Returns:
            Number of bytes written.
        """
        ...

    def delete_entry(self, path: str) -> None:
        """Remove the file at ``path``.

        Raises:
            FileNotFoundError: Path does not exist.
            IsADirectoryError: Path is a directory.
        """
        ...


__all__ = ["FileBackend"]
