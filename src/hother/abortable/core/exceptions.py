"""
Cancellation error and helpers for telling it apart from ordinary failures.
"""

from typing import Any

CANCELLATION_ERROR_NAME = "CancellationError"
DEFAULT_MESSAGE = "The operation has been aborted"


class CancellationError(Exception):
    """
    Raised when an abortable operation stops because its token was aborted.

    Do not test for this error with ``isinstance``: several independently
    imported copies of the library may coexist in one process, each with its
    own class object. Use :func:`is_cancellation_error` instead, which only
    looks at the ``name`` tag.

    Attributes:
        name: Fixed discriminant, always ``"CancellationError"``
        message: Human-readable description
    """

    name: str = CANCELLATION_ERROR_NAME

    def __init__(self, message: str | None = None):
        self.message = message or DEFAULT_MESSAGE
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"CancellationError({self.message!r})"


def is_cancellation_error(error: Any) -> bool:
    """Check whether ``error`` is a cancellation error, by tag."""
    return error is not None and getattr(error, "name", None) == CANCELLATION_ERROR_NAME


def rethrow_cancellation_error(error: BaseException) -> None:
    """
    Re-raise ``error`` if it is a cancellation error, otherwise do nothing.

    Useful in ``except`` blocks around abortable code::

        try:
            await fetch(token)
        except Exception as e:
            rethrow_cancellation_error(e)
            # normal error handling
    """
    if is_cancellation_error(error):
        raise error


def catch_cancellation_error(error: BaseException) -> None:
    """
    Swallow ``error`` if it is a cancellation error, otherwise re-raise it.

    Intended for top-level callers where cancellation is an expected outcome
    rather than a failure.
    """
    if is_cancellation_error(error):
        return
    raise error
