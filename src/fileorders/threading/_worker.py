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

"""Managed daemon thread used by the timer queue."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class BackgroundWorker:
    """Daemon thread with start-once and join-with-timeout semantics.

    The worker does not know how to stop its target; the owner signals
    shutdown through its own state (the timer queue flips a closed flag
    under its condition variable) and then calls :meth:`stop`.
    """

    target: Callable[[], None]
    name: str = "worker"
    daemon: bool = True
    _thread: threading.Thread | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def start(self) -> None:
        """Start the thread.

        Raises:
            RuntimeError: If the worker was already started.
        """
        with self._lock:
            if self._thread is not None:
                msg = "Worker already started"
                raise RuntimeError(msg)
            self._thread = threading.Thread(
                target=self.target,
                name=self.name,
                daemon=self.daemon,
            )
            self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> bool:
        """Wait for the thread to finish.

        Returns:
            True if the thread finished (or never started) within timeout.
        """
        with self._lock:
            thread = self._thread

        if thread is None:
            return True
        if thread is threading.current_thread():
            # Stopping from inside the target; the loop exits on its own.
            return False

        thread.join(timeout=timeout)
        return not thread.is_alive()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()


__all__ = ["BackgroundWorker"]
