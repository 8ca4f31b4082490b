"""
Retry policy for RPC calls.

Bounded exponential backoff: attempt ``n`` (0-based) waits
``min(initial_delay * 2**n, max_delay)`` seconds before the next try.
Only errors classified as retryable are repeated.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ..runtime.errors import ErrorHandler, RpcTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Retry settings (seconds)."""
    max_retries: int = 3
    initial_delay: float = 0.5
    max_delay: float = 5.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def calculate_delay(self, attempt: int) -> float:
        """
        Delay after a failed attempt.

        Args:
            attempt: Attempt number (0-based)

        Returns:
            Delay in seconds
        """
        return min(self.initial_delay * (2 ** attempt), self.max_delay)

    @classmethod
    def none(cls) -> RetryConfig:
        """Single attempt, no retries."""
        return cls(max_retries=0)


async def execute_with_retry(
    func: Callable[[int], Awaitable[Any]],
    config: RetryConfig,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> Any:
    """
    Run ``func(attempt)`` until it succeeds, fails non-retryably, or
    attempts run out.

    Args:
        func: Coroutine function receiving the 0-based attempt number
        config: Retry settings
        sleep: Sleep coroutine (default: ``asyncio.sleep``)

    Returns:
        Result of the first successful attempt

    Raises:
        RpcTimeoutError: If every attempt failed with a retryable error
        Exception: The first non-retryable error, unchanged
    """
    sleep = sleep or asyncio.sleep
    last_error: Optional[Exception] = None
    for attempt in range(config.max_attempts):
        try:
            result = await func(attempt)
            if attempt > 0:
                logger.info(f"Operation succeeded on attempt {attempt + 1}")
            return result
        except Exception as e:
            if not ErrorHandler.should_resend(e):
                raise
            last_error = e
            if attempt + 1 < config.max_attempts:
                delay = config.calculate_delay(attempt)
                logger.warning(f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s...")
                await sleep(delay)

    raise RpcTimeoutError(config.max_attempts, last_error)
