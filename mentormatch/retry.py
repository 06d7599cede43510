"""
Backoff for DashScope calls that fail transiently.

Only case generation goes through here. A long narrative request that
hits a rate limit or a gateway error is worth repeating; the relevance
oracle never is, since its failure just hands the slots to backfill.
"""

import functools
import time
from typing import Callable, Iterator, Optional, Tuple, Type

from .errors import LLMError

# Status codes DashScope (or a proxy in front of it) returns for load or
# gateway trouble rather than for a bad request.
RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

TRANSIENT_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "temporary failure",
    "service unavailable",
    "throttl",
    "429",
    "500",
    "502",
    "503",
)


class RetryError(Exception):
    """Every attempt failed; the last failure is chained as __cause__."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def backoff_delays(base_delay: float, factor: float, max_delay: float, count: int) -> Iterator[float]:
    """Yield `count` sleep intervals: base, base*factor, ... capped at max_delay."""
    delay = base_delay
    for _ in range(count):
        yield min(delay, max_delay)
        delay *= factor


def exponential_backoff(
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 8.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (LLMError,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
):
    """
    Retry the decorated call up to `max_retries` extra times.

    Exceptions outside `exceptions`, or rejected by `should_retry`,
    propagate unchanged on the first occurrence. When the retries run
    out a RetryError is raised from the last failure.

    on_retry(attempt, exc, delay) is called before each sleep; attempt
    counts from 1.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delays = backoff_delays(base_delay, exponential_base, max_delay, max_retries)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    delay = next(delays, None)
                    if delay is None:
                        raise RetryError(f"Gave up after {attempt} attempts: {e}", attempts=attempt) from e
                    if on_retry:
                        on_retry(attempt, e, delay)
                    time.sleep(delay)

        return wrapper
    return decorator


def should_retry_http_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUSES


def is_transient_error(exception: Exception) -> bool:
    """
    Whether a failed call is worth repeating.

    An LLMError that carries an HTTP status is judged by the status
    alone, so a 400 whose message happens to mention "timeout" is final.
    Anything else is judged by markers in its message.
    """
    if isinstance(exception, LLMError) and exception.status is not None:
        return should_retry_http_status(exception.status)
    message = str(exception).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)
