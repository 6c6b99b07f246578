"""Bounded retries for transient network failures."""

import time
from typing import Callable, TypeVar

from git_wt.exceptions import NetworkTransient
from git_wt.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def retry_transient(
    operation: Callable[[], T],
    attempts: int,
    initial_delay: float,
    backoff_factor: float,
    max_delay: float,
    description: str,
) -> T:
    """Run ``operation``, retrying only on NetworkTransient.

    Every other exception propagates on the first failure. Once the budget is
    spent the last NetworkTransient is re-raised with the attempt count.
    """
    delay = initial_delay
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except NetworkTransient as e:
            if attempt >= attempts:
                logger.error(f"{description} failed after {attempts} attempt(s)")
                raise NetworkTransient(e.url, detail=e.detail, attempts=attempts) from e

            logger.warning(f"{description} attempt {attempt}/{attempts} failed: {e.detail}")
            logger.info(f"Retrying in {delay:.1f}s...")
            time.sleep(delay)
            delay = min(delay * backoff_factor, max_delay)

    raise RuntimeError("Unreachable")
