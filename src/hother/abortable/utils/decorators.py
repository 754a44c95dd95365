"""
Decorators for abortable functions.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from hother.abortable.core.models import RetryOptions
from hother.abortable.core.retry import retry
from hother.abortable.core.token import CancellationToken

R = TypeVar("R")


def retrying(
    options: RetryOptions | None = None,
    **overrides: Any,
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """
    Decorator that retries an abortable function with exponential backoff.

    The decorated function must accept the token and the attempt number as
    its first two arguments. The wrapper accepts the token followed by the
    remaining arguments.

    Args:
        options: Backoff settings
        **overrides: Individual ``RetryOptions`` fields

    Returns:
        Decorator function

    Example:
        @retrying(base_ms=200, max_attempts=4)
        async def fetch(token: CancellationToken, attempt: int, url: str) -> bytes:
            ...

        data = await fetch(token, "https://example.com")
    """
    resolved = RetryOptions.model_validate({**(options.model_dump() if options else {}), **overrides})

    def decorator(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        @wraps(func)
        async def wrapper(token: CancellationToken, *args, **kwargs) -> R:
            async def attempt_once(attempt_token: CancellationToken, attempt: int) -> R:
                return await func(attempt_token, attempt, *args, **kwargs)

            return await retry(token, attempt_once, resolved)

        wrapper._retry_options = resolved

        return wrapper

    return decorator
