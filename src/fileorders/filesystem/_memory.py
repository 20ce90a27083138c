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

"""In-memory backend for tests and process-local scratch storage."""

from __future__ import annotations

import errno
import posixpath
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field

__all__ = ["InMemoryFileBackend"]


def _normalize(path: str) -> str:
    normalized = posixpath.normpath(path).lstrip("/") if path else ""
    return "" if normalized == "." else normalized


@dataclass(slots=True)
class InMemoryFileBackend:
    """Dictionary-backed file store raising the same errors as the host.

    Directories are implicit: a path is a directory while some file lives
    beneath it. The empty path and ``"."`` name the root directory.

    Example::

        backend = InMemoryFileBackend()
        backend.write_bytes("logs/app.log", b"boot\\n")
        backend.append_bytes("logs/app.log", b"ready\\n")
        assert backend.read_bytes("logs/app.log") == b"boot\\nready\\n"
    """

    _files: dict[str, bytes] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _is_directory(self, key: str) -> bool:
        if not key:
            return True
        prefix = f"{key}/"
        return any(name.startswith(prefix) for name in self._files)

    def _check_writable(self, key: str, path: str) -> None:
        if self._is_directory(key):
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        parent = posixpath.dirname(key)
        while parent:
            if parent in self._files:
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", path)
            parent = posixpath.dirname(parent)

    def read_bytes(self, path: str) -> bytes:
        key = _normalize(path)
        with self._lock:
            if key in self._files:
                return self._files[key]
            if self._is_directory(key):
                raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)

    def write_bytes(self, path: str, data: bytes) -> int:
        key = _normalize(path)
        with self._lock:
            self._check_writable(key, path)
            self._files[key] = bytes(data)
        return len(data)

    def append_bytes(self, path: str, data: bytes) -> int:
        key = _normalize(path)
        with self._lock:
            self._check_writable(key, path)
            self._files[key] = self._files.get(key, b"") + bytes(data)
        return len(data)

    def delete_entry(self, path: str) -> None:
        key = _normalize(path)
        with self._lock:
            if key in self._files:
                del self._files[key]
                return
            if self._is_directory(key):
                raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)

    def exists(self, path: str) -> bool:
        key = _normalize(path)
        with self._lock:
            return key in self._files or self._is_directory(key)

    def files(self) -> Mapping[str, bytes]:
        """Snapshot of stored files keyed by normalized path."""
        with self._lock:
            return dict(self._files)
