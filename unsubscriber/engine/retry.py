"""
Retry-with-backoff helper shared by the engine's classifier calls.
"""

import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from .logging import UnsubscribeLogger

T = TypeVar('T')

logger = UnsubscribeLogger("retry")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before ``attempt`` (1-based): 0 for the first, then base, 2*base, 4*base..."""
    if attempt <= 1:
        return 0.0
    return base_delay * (2 ** (attempt - 2))


def retry_with_backoff(
    operation: Callable[[], T],
    operation_name: str,
    max_attempts: int = 3,
    base_delay: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Optional[Callable[[float], None]] = None
) -> T:
    """
    Run ``operation`` until it succeeds or the attempt budget is spent.

    Only exceptions listed in ``retry_on`` trigger another attempt; anything
    else propagates immediately. When every attempt fails the last retryable
    exception is re-raised.

    Args:
        operation: Zero-argument callable to run
        operation_name: Name used in log messages
        max_attempts: Total number of attempts (including the first)
        base_delay: Delay in seconds before the second attempt; doubles after
        retry_on: Exception types that are worth another attempt
        sleep: Sleep function, injectable for tests

    Returns:
        Whatever ``operation`` returns on its first successful attempt
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    sleep = sleep or time.sleep

    for attempt in range(1, max_attempts + 1):
        delay = backoff_delay(attempt, base_delay)
        if delay > 0:
            logger.info(f"{operation_name}: retry {attempt}/{max_attempts} after {delay:.1f}s", {
                'operation': operation_name,
                'attempt': attempt,
                'delay_seconds': delay
            })
            sleep(delay)

        try:
            return operation()
        except retry_on as e:
            logger.warning(f"{operation_name}: attempt {attempt}/{max_attempts} failed", {
                'operation': operation_name,
                'attempt': attempt,
                'error': str(e)
            })
            if attempt == max_attempts:
                raise

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{operation_name} exhausted its retry budget")
