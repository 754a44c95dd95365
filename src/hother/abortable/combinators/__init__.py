"""Abortable combinators over fixed sets of concurrent operations."""

from .join import AllCombinator, abortable_all
from .base import AbortableCombinator, Executor
from .race import RaceCombinator, abortable_race

__all__ = [
    "AbortableCombinator",
    "AllCombinator",
    "Executor",
    "RaceCombinator",
    "abortable_all",
    "abortable_race",
]
