"""Retry with exponential backoff for rate-limited remote calls."""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

from common.constants import RATE_LIMIT_REASONS
from common.logging_config import get_logger
from uploader.config import (
    RETRY_BASE_DELAY_SECONDS,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_DELAY_SECONDS,
)
from uploader.exceptions import RemoteCallError

logger = get_logger(__name__)

T = TypeVar("T")


def is_rate_limit_error(exc: BaseException) -> bool:
    """True for Drive rate-limit responses (403 with a rate-limit reason, or 429)."""
    if not isinstance(exc, RemoteCallError):
        return False
    if exc.status == 429:
        return True
    return exc.status == 403 and any(reason in RATE_LIMIT_REASONS for reason in exc.reasons)


class RetryExecutor:
    """
    Runs a coroutine function, retrying only failures the classifier accepts.

    Anything the classifier rejects propagates on the first attempt. When the
    attempt budget is spent the last exception propagates unmodified.
    """

    def __init__(
        self,
        classifier: Callable[[BaseException], bool] = is_rate_limit_error,
        max_attempts: int = RETRY_MAX_ATTEMPTS,
        base_delay: float = RETRY_BASE_DELAY_SECONDS,
        max_delay: float = RETRY_MAX_DELAY_SECONDS,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.classifier = classifier
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep or asyncio.sleep

    def _delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * (2 ** attempt), self.max_delay)
        return delay + random.uniform(0, self.base_delay)

    async def run(self, operation: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """
        Await `operation(*args, **kwargs)` with retries on transient failures.

        Raises:
            Whatever the operation raised on its last attempt
        """
        for attempt in range(self.max_attempts):
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                if not self.classifier(e) or attempt == self.max_attempts - 1:
                    raise
                delay = self._delay_for(attempt)
                logger.warning(
                    f"Rate limited, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.max_attempts}): {e}"
                )
                await self._sleep(delay)
