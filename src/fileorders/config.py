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

"""Scheduler configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

DEFAULT_MAX_CONCURRENT: Final[int] = 1_000
DEFAULT_RETRY_DELAY_MS: Final[int] = 10

_MAX_CONCURRENT_ENV = "FILEORDERS_MAX_CONCURRENT"
_RETRY_DELAY_ENV = "FILEORDERS_RETRY_DELAY_MS"
_MAX_WORKERS_ENV = "FILEORDERS_MAX_WORKERS"


@dataclass(slots=True, frozen=True)
class SchedulerConfig:
    """Limits applied by :class:`~fileorders.orders.Scheduler`.

    Attributes:
        max_concurrent: Ceiling on outstanding orders of a single kind.
            Submissions beyond it are deferred, never rejected.
        retry_delay_ms: Delay between admission and path-lock retries.
        max_workers: Thread pool size for backend calls. ``None`` lets
            :class:`concurrent.futures.ThreadPoolExecutor` pick.

    Example::

        config = SchedulerConfig(max_concurrent=64, retry_delay_ms=5)
        scheduler = Scheduler(HostFileBackend(), config=config)
    """

    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            msg = f"max_concurrent must be at least 1, got {self.max_concurrent}"
            raise ValueError(msg)
        if self.retry_delay_ms < 0:
            msg = f"retry_delay_ms must not be negative, got {self.retry_delay_ms}"
            raise ValueError(msg)
        if self.max_workers is not None and self.max_workers < 1:
            msg = f"max_workers must be at least 1, got {self.max_workers}"
            raise ValueError(msg)

    @property
    def retry_delay(self) -> float:
        """Retry delay in seconds."""
        return self.retry_delay_ms / 1000

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> SchedulerConfig:
        """Build a config from ``FILEORDERS_*`` variables, defaulting the rest.

        Raises:
            ValueError: If a variable is set but is not a valid integer.
        """
        env = os.environ if env is None else env
        return cls(
            max_concurrent=_int_or_default(
                env, _MAX_CONCURRENT_ENV, DEFAULT_MAX_CONCURRENT
            ),
            retry_delay_ms=_int_or_default(
                env, _RETRY_DELAY_ENV, DEFAULT_RETRY_DELAY_MS
            ),
            max_workers=_int_from_env(env, _MAX_WORKERS_ENV),
        )


def _int_from_env(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ValueError(msg) from None


def _int_or_default(env: Mapping[str, str], name: str, default: int) -> int:
    value = _int_from_env(env, name)
    return default if value is None else value


__all__ = [
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_RETRY_DELAY_MS",
    "SchedulerConfig",
]
