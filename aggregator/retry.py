"""Timeout and bounded retry for external calls.

Every RPC read and HTTP request goes through ``with_retry`` so a slow or
flaky source is cut off after ``timeout`` seconds and retried only when the
failure is transient.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from aggregator.config import RetryConfig
from aggregator.errors import QuoteSourceError, SourceUnavailableError

logger = structlog.get_logger()

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Check whether an error is transient.

    Timeouts and errors flagged ``retryable`` (transport failures, 5xx, 429)
    are retried. Anything else (4xx, malformed data, reverts, bugs) is not.
    """
    if isinstance(error, TimeoutError):
        return True
    if isinstance(error, QuoteSourceError):
        return error.retryable
    return False


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    retry: RetryConfig,
    timeout: float,
    source: str,
) -> T:
    """Run an async operation with a per-attempt timeout and backoff.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        retry: Retry policy
        timeout: Timeout in seconds for a single attempt
        source: Source name for logs and errors

    Returns:
        The operation's result

    Raises:
        SourceUnavailableError: If the last attempt timed out
        Exception: The last error raised by the operation
    """
    attempts = max(retry.max_attempts, 1)

    for attempt in range(attempts):
        try:
            return await asyncio.wait_for(operation(), timeout=timeout)
        except Exception as e:
            last_attempt = attempt == attempts - 1
            if not is_retryable(e) or last_attempt:
                if isinstance(e, TimeoutError):
                    raise SourceUnavailableError(
                        f"{source} timed out after {timeout}s", source=source
                    ) from e
                raise

            delay = retry.delay_for(attempt)
            logger.debug(
                "retrying_external_call",
                source=source,
                attempt=attempt + 1,
                max_attempts=attempts,
                delay=delay,
                error=str(e) or type(e).__name__,
            )
            await asyncio.sleep(delay)

    # Unreachable: the loop either returns or raises
    raise AssertionError("with_retry exhausted without result")
