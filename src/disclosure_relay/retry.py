"""
Sequential sleep-then-retry for calls to rate-sensitive remote services.

Attempts never overlap: each failure is followed by a fixed pause before
the next try, and the last failure is re-raised unchanged.
"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def retry_call(
    fn: Callable[[], T],
    attempts: int = 3,
    delay_ms: int = 1000,
    description: str = "operation",
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
) -> T:
    """
    Call fn until it succeeds or the attempts are used up.

    Args:
        fn: Zero-argument callable to invoke
        attempts: Total number of attempts (>= 1)
        delay_ms: Fixed pause between attempts in milliseconds
        description: Human-readable label for log messages
        retry_on: Exception types that trigger another attempt; anything
                  else propagates immediately

    Returns:
        Whatever fn returns on the first successful attempt

    Raises:
        The exception from the final attempt once attempts are exhausted

    Example:
        >>> response = retry_call(
        ...     lambda: session.get(url, timeout=30),
        ...     attempts=3,
        ...     delay_ms=5000,
        ...     description="listing fetch"
        ... )
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == attempts:
                logger.warning(
                    f"{description} failed after {attempts} attempt(s): {e}"
                )
                raise
            logger.warning(
                f"{description} failed (attempt {attempt}/{attempts}): {e}. "
                f"Retrying in {delay_ms}ms"
            )
            time.sleep(delay_ms / 1000)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{description}: retry loop exited without result")
