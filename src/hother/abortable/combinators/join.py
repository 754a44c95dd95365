"""
Abortable join: wait for every operation, fail with the most relevant error.
"""

from typing import TypeVar

from hother.abortable.combinators.base import AbortableCombinator, Executor
from hother.abortable.core.models import Settlement
from hother.abortable.core.token import CancellationToken

T = TypeVar("T")


class AllCombinator(AbortableCombinator[T, list[T]]):
    """
    Abortable version of ``asyncio.gather``.

    The first failure aborts the remaining members. A genuine failure always
    takes precedence over a cancellation error; among failures of the same
    kind the first one observed wins.
    """

    name = "all"

    def __init__(self, token: CancellationToken, executor: Executor[T]):
        super().__init__(token, executor)
        self._values: dict[int, T] = {}
        self._rejection: Settlement | None = None

    def on_settled(self, child: CancellationToken, settlement: Settlement) -> None:
        if settlement.is_fulfilled:
            self._values[settlement.index] = settlement.value
            return

        child.abort()

        if self._rejection is None or (settlement.is_genuine_failure and self._rejection.is_cancellation):
            self._rejection = settlement

    def winner(self) -> Settlement | None:
        return self._rejection

    def outcome(self) -> list[T]:
        if self._rejection is not None:
            raise self._rejection.reason
        return [self._values[index] for index in range(len(self._values))]

    def empty_result(self) -> list[T]:
        return []


async def abortable_all(token: CancellationToken, executor: Executor[T]) -> list[T]:
    """
    Run operations concurrently and collect their results in order.

    Creates a child of ``token`` and passes it to ``executor``, which returns
    the operations to run. The child is aborted when ``token`` is aborted or
    when any operation fails. The call returns only after every operation has
    settled.

    Args:
        token: Caller's token
        executor: Called once with the child token, returns awaitables

    Returns:
        Values in the order the executor returned the operations

    Raises:
        CancellationError: If ``token`` is aborted, or only cancellations occurred
        Exception: The first genuine failure among the operations

    Example:
        first, second = await abortable_all(token, lambda child: [
            fetch(child, url_a),
            fetch(child, url_b),
        ])
    """
    return await AllCombinator(token, executor).run()
