"""
Data models for settlements and retry configuration.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hother.abortable.core.exceptions import is_cancellation_error


class SettlementStatus(str, Enum):
    """Outcome kind of a settled operation."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class Settlement(BaseModel):
    """
    The single outcome an operation settled with.

    Exactly one of ``value`` (fulfilled) or ``reason`` (rejected) is meaningful.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: SettlementStatus
    index: int = Field(ge=0, description="Position of the operation in the executor result")
    value: Any = None
    reason: BaseException | None = None

    @classmethod
    def fulfilled(cls, index: int, value: Any) -> "Settlement":
        return cls(status=SettlementStatus.FULFILLED, index=index, value=value)

    @classmethod
    def rejected(cls, index: int, reason: BaseException) -> "Settlement":
        return cls(status=SettlementStatus.REJECTED, index=index, reason=reason)

    @property
    def is_fulfilled(self) -> bool:
        return self.status == SettlementStatus.FULFILLED

    @property
    def is_cancellation(self) -> bool:
        """Rejected because the operation observed an aborted token."""
        return not self.is_fulfilled and is_cancellation_error(self.reason)

    @property
    def is_genuine_failure(self) -> bool:
        """Rejected for any reason other than cancellation."""
        return not self.is_fulfilled and not is_cancellation_error(self.reason)

    def unwrap(self) -> Any:
        """Return the value, or raise the rejection reason."""
        if self.is_fulfilled:
            return self.value
        raise self.reason

    def log_context(self) -> dict[str, Any]:
        """Get context dict for structured logging."""
        context: dict[str, Any] = {"index": self.index, "status": self.status.value}
        if not self.is_fulfilled:
            context["reason_type"] = type(self.reason).__name__
            context["cancellation"] = self.is_cancellation
        return context


class RetryOptions(BaseModel):
    """
    Exponential backoff settings for :func:`hother.abortable.retry`.

    Example: with ``base_ms=1000`` and ``max_delay_ms=3000`` retries are
    scheduled after 1000ms, 2000ms, 3000ms, 3000ms and so on, before jitter.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_ms: float = Field(default=1000, gt=0, description="Starting delay before the first retry")
    max_delay_ms: float = Field(default=15000, gt=0, description="Ceiling for the delay between attempts")
    max_attempts: int | None = Field(default=None, ge=1, description="Total attempt ceiling, None for unbounded")
    on_error: Callable[[Exception, int, float], Any] | None = Field(
        default=None,
        description="Called as on_error(error, attempt, delay_ms) after each failed attempt; raise to stop retrying",
    )
    jitter: bool = Field(default=True, description="Randomize each delay uniformly over [0, delay]")

    def log_context(self) -> dict[str, Any]:
        """Get context dict for structured logging."""
        return {
            "base_ms": self.base_ms,
            "max_delay_ms": self.max_delay_ms,
            "max_attempts": self.max_attempts,
            "jitter": self.jitter,
        }
