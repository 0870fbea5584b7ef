"""Retry logic with exponential backoff."""

import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = (Exception,),
    should_retry: Callable[[Exception], bool] | None = None,
) -> Callable:
    """
    Retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts
        initial_delay: Initial delay in seconds
        backoff_factor: Multiplier for delay after each attempt
        exceptions: Tuple of exceptions to catch and retry
        should_retry: Optional predicate; exceptions it rejects are raised at once

    Returns:
        Decorator function
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = initial_delay
            retry_start_time = time.time()

            for attempt in range(1, max_attempts + 1):
                try:
                    result = func(*args, **kwargs)
                    if attempt > 1:
                        logger.info(
                            "retry_succeeded",
                            func=func.__name__,
                            attempt=attempt,
                            total_retry_time=round(time.time() - retry_start_time, 2),
                        )
                    return result

                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise

                    if attempt == max_attempts:
                        logger.error(
                            "retry_exhausted",
                            func=func.__name__,
                            attempts=attempt,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                        raise

                    logger.warning(
                        "retry_attempt",
                        func=func.__name__,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        delay=delay,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    time.sleep(delay)
                    delay *= backoff_factor

            # max_attempts < 1: run once without retrying
            return func(*args, **kwargs)

        return wrapper

    return decorator
