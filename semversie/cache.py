"""Single-flight cache for host lookups.

Concurrent callers asking for the same key share one underlying call.
The entry lives only while that call is in flight and is evicted as soon
as it settles, whether it returned or raised, so later callers always
see fresh data.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

T = TypeVar("T")


class CallCache:
    """Explicit, caller-owned cache passed into the source adapters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inflight: dict[str, Future[Any]] = {}

    def call(self, key: str, fn: Callable[[], T]) -> T:
        """Run ``fn`` for ``key``, or wait on the identical call already running."""
        with self._lock:
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
        if not owner:
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._inflight.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._inflight

    def __len__(self) -> int:
        with self._lock:
            return len(self._inflight)
