"""
Retry with exponential backoff, honoring cancellation.
"""

import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from hother.abortable.core.exceptions import is_cancellation_error
from hother.abortable.core.models import RetryOptions
from hother.abortable.core.token import CancellationToken
from hother.abortable.utils.logging import get_logger
from hother.abortable.utils.waiting import delay

logger = get_logger(__name__)

T = TypeVar("T")

# Keeps the int->float conversion in range
_MAX_EXPONENT = 63


def backoff_delay_ms(attempt: int, base_ms: float, max_delay_ms: float) -> float:
    """
    Nominal delay after the given failed attempt, before jitter.

    Args:
        attempt: 1-based number of the attempt that just failed
        base_ms: Delay after the first attempt
        max_delay_ms: Ceiling

    Returns:
        ``min(base_ms * 2 ** (attempt - 1), max_delay_ms)``
    """
    exponent = min(attempt - 1, _MAX_EXPONENT)
    return min(base_ms * 2**exponent, max_delay_ms)


def _resolve_options(options: RetryOptions | None, overrides: dict[str, Any]) -> RetryOptions:
    if options is None:
        return RetryOptions(**overrides)
    if overrides:
        return RetryOptions.model_validate({**options.model_dump(), **overrides})
    return options


async def retry(
    token: CancellationToken,
    operation: Callable[[CancellationToken, int], Awaitable[T]],
    options: RetryOptions | None = None,
    **overrides: Any,
) -> T:
    """
    Run ``operation`` until it succeeds, backing off exponentially between attempts.

    Cancellation errors are never retried. Any other error is passed to
    ``options.on_error`` (which may raise to stop retrying) and, unless the
    attempt ceiling is reached, retried after a jittered delay. The delay is
    cut short with a cancellation error when the token is aborted.

    Args:
        token: Token governing all attempts and delays
        operation: Async callable invoked as ``operation(token, attempt)``
        options: Backoff settings
        **overrides: Individual ``RetryOptions`` fields

    Returns:
        The first successful result

    Raises:
        CancellationError: If the token is aborted or the operation was cancelled
        Exception: The last operation error once attempts are exhausted, or
            whatever ``on_error`` raised

    Example:
        result = await retry(token, lambda token, attempt: fetch(token, url), max_attempts=5)
    """
    options = _resolve_options(options, overrides)
    attempt = 1

    while True:
        token.throw_if_aborted()

        try:
            return await operation(token, attempt)
        except Exception as error:
            if is_cancellation_error(error):
                raise

            delay_ms = backoff_delay_ms(attempt, options.base_ms, options.max_delay_ms)
            if options.jitter:
                delay_ms = random.uniform(0, delay_ms)

            if options.on_error is not None:
                options.on_error(error, attempt, delay_ms)

            if options.max_attempts is not None and attempt >= options.max_attempts:
                logger.warning(
                    "Retry attempts exhausted",
                    token_id=token.id,
                    attempts=attempt,
                    error=str(error),
                )
                raise

            logger.info(
                "Attempt failed, retrying",
                token_id=token.id,
                attempt=attempt,
                delay_ms=round(delay_ms, 3),
                error=str(error),
                error_type=type(error).__name__,
            )

        await delay(token, delay_ms / 1000)
        attempt += 1
