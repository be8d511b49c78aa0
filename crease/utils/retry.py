"""
Bounded retry with exponential backoff
"""
import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay after failed attempt number `attempt` (1-based): base * 2^(attempt-1)"""
    return base_delay * (2 ** (attempt - 1))


def retry_with_backoff(
    fn: Callable[[], T],
    attempts: int = 3,
    base_delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
    retry_on: tuple = (Exception,),
) -> T:
    """
    Call `fn` until it succeeds or `attempts` calls have failed.

    The last exception is re-raised once attempts are exhausted. No sleep
    follows the final failure.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == attempts:
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.warning("Attempt %s/%s failed (%s), retrying in %.2fs", attempt, attempts, e, delay)
            sleep(delay)
