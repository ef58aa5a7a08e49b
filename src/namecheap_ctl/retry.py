"""Bounded retry for calls that hit the registrar's request quota.

Namecheap enforces unpublished limits (roughly 20/minute, 700/hour and
8000/day per user). A rate-limited call is retried after a fixed sleep; the
quota window is short, so a fixed backoff converges quickly.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from .models import RateLimitedError

LOG = logging.getLogger("namecheap_ctl")

T = TypeVar("T")

MAX_ATTEMPTS = 23
BACKOFF_SECONDS = 5.0


def do_with_retry(
    operation: Callable[[], T],
    max_attempts: int = MAX_ATTEMPTS,
    backoff: float = BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call operation, retrying while the registrar reports rate limiting.

    At most ``max_attempts`` calls are made. Errors other than
    ``RateLimitedError`` propagate immediately; once the attempts are used up
    the last ``RateLimitedError`` is raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except RateLimitedError:
            if attempt >= max_attempts:
                LOG.error("Namecheap rate limit still exceeded after %d attempts.", attempt)
                raise
            LOG.warning("Namecheap rate limit exceeded. Waiting %ss to retry.", backoff)
            sleep(backoff)


class RetryPolicy:
    """Callable wrapper binding retry settings from configuration."""

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        backoff: float = BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.sleep = sleep

    def __call__(self, operation: Callable[[], T]) -> T:
        return do_with_retry(operation, self.max_attempts, self.backoff, self.sleep)
