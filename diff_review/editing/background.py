"""
Background differencing — cancellation tokens, a latest-result register,
and the worker pool that runs diff tasks off the interactive thread.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Cooperative cancel flag polled by :func:`diff_lines`."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class LatestResultSlot:
    """Single-slot register where only the newest request may land.

    Each :meth:`issue` call cancels the previous request's token and bumps
    the generation; :meth:`install` only runs for the current generation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._token: CancellationToken | None = None

    def issue(self) -> tuple[int, CancellationToken]:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._generation += 1
            self._token = CancellationToken()
            return self._generation, self._token

    def cancel(self) -> None:
        """Cancel the in-flight request and invalidate its generation."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()
                self._token = None
            self._generation += 1

    def is_latest(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def install(self, generation: int, apply: Callable[[], bool]) -> bool:
        """Run *apply* under the slot lock if *generation* is still current.

        Returns ``False`` when the result is stale or *apply* declines it.
        """
        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "[DiffReview] Discarding stale result (gen %d, latest %d)",
                    generation, self._generation,
                )
                return False
            self._token = None
            return apply()

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._token is not None and not self._token.cancelled


class DiffWorker:
    """Thread pool for differencing tasks."""

    def __init__(self, max_workers: int = 1) -> None:
        self._pool = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="diff-review",
        )

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        return self._pool.submit(fn, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "DiffWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
