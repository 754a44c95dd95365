"""
Abortable race: the first settlement aborts the rest, real errors win.
"""

from typing import TypeVar

from hother.abortable.combinators.base import AbortableCombinator, Executor
from hother.abortable.core.models import Settlement
from hother.abortable.core.token import CancellationToken

T = TypeVar("T")


class RaceCombinator(AbortableCombinator[T, T]):
    """
    Abortable race over a fixed set of operations.

    Any settlement aborts the remaining members, but the result is decided
    only once all of them have settled: the first genuine failure wins over
    everything, then the first fulfillment, then the first cancellation.
    """

    name = "race"

    def __init__(self, token: CancellationToken, executor: Executor[T]):
        super().__init__(token, executor)
        self._result: Settlement | None = None

    def on_settled(self, child: CancellationToken, settlement: Settlement) -> None:
        child.abort()

        current = self._result
        if current is None:
            self._result = settlement
        elif settlement.is_genuine_failure:
            if not current.is_genuine_failure:
                self._result = settlement
        elif settlement.is_fulfilled and current.is_cancellation:
            self._result = settlement

    def winner(self) -> Settlement | None:
        return self._result

    def outcome(self) -> T:
        return self._result.unwrap()

    def empty_result(self) -> T:
        raise ValueError("race requires at least one operation")


async def abortable_race(token: CancellationToken, executor: Executor[T]) -> T:
    """
    Run operations concurrently and return the first result.

    Creates a child of ``token`` and passes it to ``executor``. The child is
    aborted when ``token`` is aborted or when any operation settles. All
    operations are awaited before returning, so a genuine failure from an
    operation that lost the race still surfaces instead of a stale result.

    Timeouts are built by racing the work against :func:`delay`:

        async def timeout(child: CancellationToken) -> None:
            await delay(child, 5.0)

        response = await abortable_race(token, lambda child: [
            timeout(child),
            fetch(child, url),
        ])
        if response is None:
            ...  # timed out

    Args:
        token: Caller's token
        executor: Called once with the child token, returns awaitables

    Returns:
        The winning value

    Raises:
        CancellationError: If ``token`` is aborted and no operation produced a result
        Exception: The first genuine failure among the operations
        ValueError: If the executor returned no operations
    """
    return await RaceCombinator(token, executor).run()
