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

"""Host filesystem backend.

Example usage::

    from fileorders.filesystem import HostFileBackend

    # Paths are used exactly as given
    backend = HostFileBackend()

    # Paths are resolved under a root and may not escape it
    sandboxed = HostFileBackend(_root="/srv/uploads")
    sandboxed.write_bytes("reports/today.txt", b"ok")
"""

from __future__ import annotations

import errno
from dataclasses import dataclass
from pathlib import Path

__all__ = ["HostFileBackend"]


@dataclass(slots=True)
class HostFileBackend:
    """Backend that performs each primitive directly against host files.

    When a root is configured, relative paths are resolved under it and any
    path that resolves outside it (through ``..`` or symlinks) is refused
    with :class:`PermissionError`. Without a root, paths go to the operating
    system unchanged.
    """

    _root: str | None = None
    _create_parents: bool = True

    @property
    def root(self) -> str | None:
        """Sandbox root, or ``None`` when paths are used as given."""
        return self._root

    def _resolve_path(self, path: str) -> Path:
        """Map ``path`` to the host path it refers to.

        Raises:
            PermissionError: If the resolved path escapes the root directory.
        """
        if self._root is None:
            return Path(path)

        root_path = Path(self._root).resolve()
        candidate = (root_path / path).resolve()
        try:
            _ = candidate.relative_to(root_path)
        except ValueError:
            msg = f"Path escapes root directory: {path}"
            raise PermissionError(errno.EACCES, msg, path) from None
        return candidate

    def _prepare_parent(self, resolved: Path) -> None:
        if self._create_parents and not resolved.parent.exists():
            resolved.parent.mkdir(parents=True, exist_ok=True)

    def read_bytes(self, path: str) -> bytes:
        return self._resolve_path(path).read_bytes()

    def write_bytes(self, path: str, data: bytes) -> int:
        resolved = self._resolve_path(path)
        self._prepare_parent(resolved)
        return resolved.write_bytes(data)

    def append_bytes(self, path: str, data: bytes) -> int:
        resolved = self._resolve_path(path)
        self._prepare_parent(resolved)
        with resolved.open("ab") as f:
            return f.write(data)

    def delete_entry(self, path: str) -> None:
        resolved = self._resolve_path(path)
        if resolved.is_dir():
            raise IsADirectoryError(errno.EISDIR, "Is a directory", path)
        resolved.unlink()
