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

"""Per-path mutual exclusion for orders under execution."""

from __future__ import annotations

from threading import Lock

from ..errors import PathNotLockedError


class PathLock:
    """Set of paths whose backend call has started and not yet finished.

    ``try_acquire`` never blocks. A caller that fails to acquire is expected
    to retry later; there is no wait list, so no ordering between
    contenders is implied.

    Example::

        locks = PathLock()
        assert locks.try_acquire("a.txt")
        assert not locks.try_acquire("a.txt")
        locks.release("a.txt")
    """

    __slots__ = ("_held", "_lock")

    def __init__(self) -> None:
        super().__init__()
        self._held: set[str] = set()
        self._lock = Lock()

    def try_acquire(self, path: str) -> bool:
        """Mark ``path`` as held; False if it already is."""
        with self._lock:
            if path in self._held:
                return False
            self._held.add(path)
            return True

    def release(self, path: str) -> None:
        """Release ``path``.

        Raises:
            PathNotLockedError: If ``path`` is not held.
        """
        with self._lock:
            try:
                self._held.remove(path)
            except KeyError:
                raise PathNotLockedError(f"Path {path!r} is not locked") from None

    def is_locked(self, path: str) -> bool:
        with self._lock:
            return path in self._held

    def held(self) -> frozenset[str]:
        """Snapshot of the currently held paths."""
        with self._lock:
            return frozenset(self._held)

    def __len__(self) -> int:
        with self._lock:
            return len(self._held)


__all__ = ["PathLock"]
