"""
Abortable waiting primitives.
"""

import inspect
from collections.abc import Awaitable
from typing import NoReturn, TypeVar

import anyio

from hother.abortable.core.exceptions import CancellationError
from hother.abortable.core.token import CancellationToken
from hother.abortable.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def delay(token: CancellationToken, seconds: float) -> None:
    """
    Sleep for ``seconds`` unless the token is aborted first.

    Raises:
        CancellationError: If the token is aborted before or during the wait
    """
    token.throw_if_aborted()

    with anyio.move_on_after(seconds) as scope:
        await token.wait_for_abort()

    if not scope.cancelled_caught:
        raise CancellationError(token.message)


async def forever(token: CancellationToken) -> NoReturn:
    """
    Wait until the token is aborted, then fail.

    Handy as a race member that never produces a value of its own.

    Raises:
        CancellationError: Always, once the token is aborted
    """
    await token.wait_for_abort()
    raise CancellationError(token.message)


async def abortable(token: CancellationToken, awaitable: Awaitable[T]) -> T:
    """
    Await something that does not observe tokens, stopping it on abort.

    The awaitable runs inside an anyio cancel scope that is cancelled as soon
    as the token is aborted.

    Args:
        token: Token governing the wait
        awaitable: Work that knows nothing about tokens

    Returns:
        The awaitable's result

    Raises:
        CancellationError: If the token is aborted before the work completes
    """
    if token.is_aborted:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise CancellationError(token.message)

    with anyio.CancelScope() as scope:
        remove_listener = token.on_abort(lambda _: scope.cancel())
        try:
            return await awaitable
        finally:
            remove_listener()

    logger.debug("Abortable wait interrupted", token_id=token.id)
    raise CancellationError(token.message)
