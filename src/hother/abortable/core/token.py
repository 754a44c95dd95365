"""
Cascading cancellation token implementation.
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Optional

import anyio
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from hother.abortable.core.exceptions import CancellationError
from hother.abortable.utils.logging import get_logger

logger = get_logger(__name__)

AbortListener = Callable[["CancellationToken"], Any]


class CancellationToken(BaseModel):
    """
    Observable, one-way cancellation state shared between a caller and the
    operations it starts.

    A token is either pending or aborted. Aborting is idempotent and runs each
    registered listener exactly once. Tokens created with a ``parent`` are
    aborted together with it; aborting a child never touches the parent.

    All methods are synchronous except :meth:`wait_for_abort`, so listeners
    and cascades run within the cooperative step that called :meth:`abort`.

    Attributes:
        id: Unique token identifier
        parent_id: Identifier of the parent token, if any
        aborted: Whether the token has been aborted
        message: Optional abort message
        aborted_at: When the token was aborted
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    parent_id: str | None = None
    aborted: bool = False
    message: str | None = None
    aborted_at: datetime | None = None

    _listeners: Any = PrivateAttr(default_factory=list)
    _event: Any = PrivateAttr(default=None)
    _parent: Any = PrivateAttr(default=None)

    def __init__(self, parent: Optional["CancellationToken"] = None, **data):
        if parent is not None:
            data.setdefault("parent_id", parent.id)
        super().__init__(**data)

        if parent is not None:
            self._parent = parent
            # Fires immediately when the parent is already aborted
            parent.on_abort(self._on_parent_abort)

        logger.debug("Created cancellation token", token_id=self.id, parent_id=self.parent_id)

    def __hash__(self) -> int:
        """Make token hashable based on ID."""
        return hash(self.id)

    def __eq__(self, other) -> bool:
        """Check equality based on ID."""
        if not isinstance(other, CancellationToken):
            return False
        return self.id == other.id

    @property
    def is_aborted(self) -> bool:
        return self.aborted

    @property
    def parent(self) -> Optional["CancellationToken"]:
        """Parent token this one cascades from, while still attached."""
        return self._parent

    def create_child(self) -> "CancellationToken":
        """Create a token that is aborted whenever this one is."""
        return CancellationToken(parent=self)

    def abort(self, message: str | None = None) -> bool:
        """
        Abort the token.

        Args:
            message: Optional abort message, carried into raised errors

        Returns:
            True if the token was aborted by this call, False if it already was
        """
        if self.aborted:
            return False

        self.aborted = True
        self.message = message
        self.aborted_at = datetime.now(UTC)

        if self._event is not None:
            self._event.set()

        listeners, self._listeners = self._listeners, []
        logger.debug("Token aborted", token_id=self.id, listener_count=len(listeners), message=message)

        for i, listener in enumerate(listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(
                    "Error in abort listener",
                    token_id=self.id,
                    listener_index=i,
                    error=str(e),
                    exc_info=True,
                )

        return True

    def on_abort(self, listener: AbortListener) -> Callable[[], None]:
        """
        Register a listener to be called once when the token is aborted.

        The listener receives the token as its only argument. If the token is
        already aborted the listener is called immediately and not stored.

        Args:
            listener: Synchronous callable accepting the token

        Returns:
            A callable that unregisters the listener
        """
        if self.aborted:
            listener(self)
            return lambda: None

        self._listeners.append(listener)
        return lambda: self.remove_listener(listener)

    def remove_listener(self, listener: AbortListener) -> bool:
        """
        Unregister a listener.

        Returns:
            True if the listener was registered
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def detach(self) -> None:
        """Stop following the parent token. Own state is left untouched."""
        if self._parent is not None:
            self._parent.remove_listener(self._on_parent_abort)
            self._parent = None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def throw_if_aborted(self) -> None:
        """
        Raise if the token is aborted, otherwise do nothing.

        Raises:
            CancellationError: If the token is aborted
        """
        if self.aborted:
            raise CancellationError(self.message)

    async def wait_for_abort(self) -> None:
        """Wait until the token is aborted."""
        if self.aborted:
            return
        if self._event is None:
            self._event = anyio.Event()
        await self._event.wait()

    def _on_parent_abort(self, parent: "CancellationToken") -> None:
        self.abort(parent.message or f"Parent token {parent.id[:8]} was aborted")

    def __str__(self) -> str:
        """String representation of token."""
        state = "aborted" if self.aborted else "pending"
        return f"CancellationToken(id={self.id[:8]}, {state})"

    def __repr__(self) -> str:
        """Detailed representation of token."""
        return f"CancellationToken(id='{self.id}', aborted={self.aborted}, parent_id={self.parent_id}, message={self.message!r})"
