"""
Base class for abortable combinators.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

import anyio

from hother.abortable.core.models import Settlement
from hother.abortable.core.token import CancellationToken
from hother.abortable.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Executor = Callable[[CancellationToken], Iterable[Awaitable[T]]]


class AbortableCombinator(ABC, Generic[T, R]):
    """
    Runs a fixed, ordered set of abortable operations concurrently.

    The operations receive a child of the caller's token, so aborting the
    caller's token aborts every member. Every member is always awaited to
    completion before :meth:`run` returns; subclasses decide, per settlement,
    whether to abort the remaining members and which outcome wins.

    Members must observe their token and fail with a cancellation error
    promptly once it is aborted, otherwise :meth:`run` waits for them.
    """

    name: str = "combinator"

    def __init__(self, token: CancellationToken, executor: Executor[T]):
        """
        Initialize combinator.

        Args:
            token: Caller's token
            executor: Called once with the child token, returns the operations
        """
        self.token = token
        self.executor = executor
        self.settlements: list[Settlement] = []

    async def run(self) -> R:
        """
        Start all operations, wait for every one of them, and decide the outcome.

        Raises:
            CancellationError: If the caller's token is already aborted; the
                executor is not called in that case
        """
        self.token.throw_if_aborted()

        child = self.token.create_child()
        try:
            awaitables = list(self.executor(child))

            logger.debug(
                f"{self.name} started",
                **self.log_context(),
                child_token_id=child.id,
                member_count=len(awaitables),
            )

            if not awaitables:
                return self.empty_result()

            async with anyio.create_task_group() as tg:
                for index, awaitable in enumerate(awaitables):
                    tg.start_soon(self._settle, child, index, awaitable)
        finally:
            child.detach()

        return self._finish()

    async def _settle(self, child: CancellationToken, index: int, awaitable: Awaitable[T]) -> None:
        try:
            value = await awaitable
        except Exception as e:
            settlement = Settlement.rejected(index, e)
        else:
            settlement = Settlement.fulfilled(index, value)

        self.settlements.append(settlement)
        logger.debug(f"{self.name} member settled", child_token_id=child.id, **settlement.log_context())
        self.on_settled(child, settlement)

    def _finish(self) -> R:
        winner = self.winner()
        logger.debug(
            f"{self.name} settled",
            **self.log_context(),
            outcome=winner.status.value if winner else "fulfilled",
        )
        return self.outcome()

    @abstractmethod
    def on_settled(self, child: CancellationToken, settlement: Settlement) -> None:
        """
        Handle one member's settlement.

        Args:
            child: Token shared by all members
            settlement: The member's outcome
        """

    @abstractmethod
    def winner(self) -> Settlement | None:
        """Settlement that decides the aggregate outcome, if a single one does."""

    @abstractmethod
    def outcome(self) -> R:
        """Aggregate result once every member has settled; raises on failure."""

    @abstractmethod
    def empty_result(self) -> R:
        """Result when the executor produced no operations."""

    def log_context(self) -> dict[str, Any]:
        """Get context dict for structured logging."""
        return {
            "combinator": self.name,
            "token_id": self.token.id,
            "settled_count": len(self.settlements),
        }
