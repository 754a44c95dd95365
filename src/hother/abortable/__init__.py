"""
Abortable - Cooperative Cancellation for Async Python

Cancellation tokens with parent/child cascades, a tag-identified cancellation
error, exponential-backoff retry, and abortable ``all``/``race`` combinators
over concurrent operations.
"""

import importlib.metadata

from .combinators import AbortableCombinator, AllCombinator, RaceCombinator, abortable_all, abortable_race
from .core.exceptions import (
    CancellationError,
    catch_cancellation_error,
    is_cancellation_error,
    rethrow_cancellation_error,
)
from .core.models import RetryOptions, Settlement, SettlementStatus
from .core.retry import backoff_delay_ms, retry
from .core.token import CancellationToken
from .utils.decorators import retrying
from .utils.waiting import abortable, delay, forever

try:
    __version__ = importlib.metadata.version("hother-abortable")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0+dev"

__all__ = [
    # Models
    "CancellationToken",
    "RetryOptions",
    "Settlement",
    "SettlementStatus",
    # Exceptions
    "CancellationError",
    "is_cancellation_error",
    "rethrow_cancellation_error",
    "catch_cancellation_error",
    # Retry
    "retry",
    "retrying",
    "backoff_delay_ms",
    # Combinators
    "abortable_all",
    "abortable_race",
    "AbortableCombinator",
    "AllCombinator",
    "RaceCombinator",
    # Utilities
    "abortable",
    "delay",
    "forever",
]
