"""
Deadline and cancellation context for the ingestion pipeline.

A single Deadline is created when the archive download starts and is passed
explicitly to every stage that performs I/O afterwards. Awaitables run through
Deadline.run are cancelled when the budget elapses, which tears down the
underlying HTTP request instead of abandoning it.
"""

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import IngestionTimeoutError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Deadline:
    """Wall-clock budget shared by all stages from download onwards."""

    def __init__(
        self,
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        started_at: Optional[float] = None,
    ):
        """
        Initialize deadline.

        Args:
            timeout_seconds: Total budget in seconds
            clock: Monotonic clock, injectable for tests
            started_at: Clock reading the budget counts from (defaults to now)
        """
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self.started_at = clock() if started_at is None else started_at
        self._cancelled = threading.Event()
        self._cancelled_operation: Optional[str] = None

    def elapsed(self) -> float:
        return self._clock() - self.started_at

    def remaining(self) -> float:
        return max(0.0, self.timeout_seconds - self.elapsed())

    @property
    def expired(self) -> bool:
        return self.elapsed() >= self.timeout_seconds

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def cancelled_operation(self) -> Optional[str]:
        return self._cancelled_operation

    def cancel(self, operation: Optional[str] = None) -> None:
        """Fire the cancellation signal. Idempotent."""
        if not self._cancelled.is_set():
            self._cancelled_operation = operation
            self._cancelled.set()
            logger.info(
                f"Deadline cancelled during {operation or 'pipeline'} "
                f"after {self.elapsed():.2f}s"
            )

    def check(self, operation: str) -> None:
        """
        Raise if the budget is exhausted or the signal was already fired.

        Safe to call from worker threads.

        Raises:
            IngestionTimeoutError: If the deadline has passed
        """
        if self.cancelled or self.expired:
            self.cancel(operation)
            raise self._timeout_error(operation)

    async def run(self, awaitable: Awaitable[T], operation: str) -> T:
        """
        Await an operation, cancelling it when the remaining budget runs out.

        Args:
            awaitable: Coroutine or future performing I/O
            operation: Name used in logs and in the timeout error

        Returns:
            Result of the awaitable

        Raises:
            IngestionTimeoutError: If the deadline elapses first
        """
        remaining = self.remaining()
        if self.cancelled or remaining <= 0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.cancel(operation)
            raise self._timeout_error(operation)

        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError:
            self.cancel(operation)
            raise self._timeout_error(operation) from None

    def _timeout_error(self, operation: str) -> IngestionTimeoutError:
        elapsed = self.elapsed()
        return IngestionTimeoutError(
            f"Operation '{operation}' exceeded the {self.timeout_seconds:g}s deadline "
            f"(elapsed {elapsed:.2f}s)",
            operation=operation,
            timeout_seconds=self.timeout_seconds,
            elapsed_seconds=elapsed,
        )
