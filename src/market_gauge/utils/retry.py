"""Retry with exponential backoff for flaky upstream data sources."""

import logging
import time
from typing import Callable, Optional, TypeVar

from ..errors import DataSourceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_seconds: float) -> float:
    """Delay before retrying after ``attempt`` (1-based) failed: base, 2*base, 4*base..."""
    return base_seconds * (2 ** (attempt - 1))


def retry_call(
    fetch_fn: Callable[[], T],
    source: str,
    attempts: int = 3,
    backoff_seconds: float = 1.0,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call ``fetch_fn`` until it succeeds or ``attempts`` are used up.

    Args:
        fetch_fn: Zero-argument callable performing the fetch
        source: Name used in logs and in the raised error
        attempts: Maximum number of calls
        backoff_seconds: Base delay, doubled after each failure
        sleep: Sleep function (injectable for tests)

    Returns:
        Whatever ``fetch_fn`` returns

    Raises:
        DataSourceError: If every attempt failed
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    pause = sleep or time.sleep
    last_error: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return fetch_fn()
        except Exception as e:
            last_error = e
            logger.warning(f"{source} attempt {attempt}/{attempts} failed: {e}")
            if attempt < attempts:
                pause(backoff_delay(attempt, backoff_seconds))
    raise DataSourceError(source, f"all {attempts} attempts failed: {last_error}") from last_error
