"""
Retry utilities for read-only network calls.

Cluster-mutating requests are never retried; only idempotent queries such as
node identity lookups and health checks go through these helpers.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from subnetbox.commands.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_RETRY_DELAY,
)
from subnetbox.commands.errors import TransportError

logger = logging.getLogger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        delay: float = DEFAULT_RETRY_DELAY,
        backoff: float = DEFAULT_RETRY_BACKOFF,
        exceptions: tuple = (TransportError,),
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self.exceptions = exceptions


async def retry_async_call(
    func: Callable, *args, config: Optional[RetryConfig] = None, **kwargs
) -> Any:
    """Await ``func(*args, **kwargs)``, retrying the exceptions named by ``config``.

    The delay between attempts grows by ``config.backoff``. Once the attempts
    are used up the last error propagates unchanged.
    """
    retry_config = config or RetryConfig()
    current_delay = retry_config.delay

    for attempt in range(retry_config.max_attempts):
        try:
            return await func(*args, **kwargs)
        except retry_config.exceptions as e:
            # Don't retry on the last attempt
            if attempt == retry_config.max_attempts - 1:
                raise
            logger.debug(
                "Retrying %s after error (attempt %d/%d): %s",
                getattr(func, "__name__", func),
                attempt + 1,
                retry_config.max_attempts,
                e,
            )
            await asyncio.sleep(current_delay)
            current_delay *= retry_config.backoff


QUERY_RETRY_CONFIG = RetryConfig(
    max_attempts=DEFAULT_RETRY_ATTEMPTS,
    delay=DEFAULT_RETRY_DELAY,
    backoff=DEFAULT_RETRY_BACKOFF,
    exceptions=(TransportError,),
)
