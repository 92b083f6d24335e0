"""Retrying flaky calls: Ollama HTTP requests and instance readiness checks.

With ``exponential_base=1.0`` every wait is ``base_delay``, which turns the
policy into a fixed-interval poll.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Iterator, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)
T = TypeVar("T")

NETWORK_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.RequestException,
    TimeoutError,
    ConnectionError,
)


class RetryPolicy:
    """Re-invoke a callable on selected exceptions, sleeping between tries.

    Args:
        max_retries: Retries after the first attempt.
        base_delay: Seconds to wait before the first retry.
        max_delay: Upper bound for any single wait.
        exponential_base: Growth factor of the wait per retry.
        retry_on: Exceptions worth retrying; anything else propagates at once.
        sleep: Sleep function, replaced in tests.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        retry_on: Tuple[Type[BaseException], ...] = NETWORK_ERRORS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.retry_on = retry_on
        self.sleep = sleep

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry: int) -> float:
        """Wait before retry number ``retry + 1``."""
        return min(self.base_delay * self.exponential_base**retry, self.max_delay)

    def delays(self) -> Iterator[float]:
        for retry in range(self.max_retries):
            yield self.delay_for(retry)

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        name = getattr(func, "__name__", repr(func))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for retry, delay in enumerate(self.delays(), start=1):
                try:
                    return func(*args, **kwargs)
                except self.retry_on as exc:
                    logger.warning(
                        "%s failed (%s: %s), retry %d/%d in %.1fs",
                        name, type(exc).__name__, exc, retry, self.max_retries, delay,
                    )
                    self.sleep(delay)

            # Last attempt: whatever it raises goes to the caller
            try:
                return func(*args, **kwargs)
            except self.retry_on:
                logger.error("%s still failing after %d attempts", name, self.attempts)
                raise

        return wrapper
