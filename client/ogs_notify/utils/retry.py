"""Retry helpers with exponential backoff."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError, InterfaceError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Substrings of driver errors that are worth another attempt
TRANSIENT_DB_ERRORS = (
    "database is locked",
    "connection refused",
    "connection reset",
    "connection closed",
    "server closed",
    "timeout",
    "too many clients",
)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    max_attempts counts the first call, so 1 means no retry.
    Delay before attempt n+1 is base_delay * 2**(n-1), capped at max_delay.
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


async def retry_with_backoff(
    coro_func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    should_retry: Callable[[Exception], bool],
    description: str = "operation",
) -> T:
    """Call coro_func until it succeeds, the error is not retryable, or attempts run out.

    Args:
        coro_func: Async function to call (should be a callable that returns a coroutine)
        policy: Attempt limit and backoff
        should_retry: Predicate deciding whether an exception is transient
        description: Label used in log messages

    Returns:
        The result of the coroutine function

    Raises:
        The last exception raised by coro_func
    """
    attempt = 1
    while True:
        try:
            return await coro_func()
        except Exception as e:
            if attempt >= policy.max_attempts or not should_retry(e):
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{description} failed ({e}), retrying in {delay}s "
                f"(attempt {attempt + 1}/{policy.max_attempts})"
            )
            await asyncio.sleep(delay)
            attempt += 1


def is_transient_db_error(exc: Exception) -> bool:
    """Check whether a database error is a transient lock or connection error."""
    if not isinstance(exc, (OperationalError, InterfaceError)):
        return False
    error_str = str(exc).lower()
    return any(msg in error_str for msg in TRANSIENT_DB_ERRORS)


async def retry_on_lock(
    coro_func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 0.1,
) -> T:
    """Retry a database operation on transient errors with exponential backoff."""
    return await retry_with_backoff(
        coro_func,
        RetryPolicy(max_attempts=max_retries, base_delay=base_delay),
        is_transient_db_error,
        description="Database operation",
    )
