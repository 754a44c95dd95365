"""
Shared fixtures and operation helpers for tests.
"""

from contextlib import asynccontextmanager
from typing import Any

import anyio
import pytest

from hother.abortable import CancellationToken, delay


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio."""
    return "asyncio"


@pytest.fixture
def token():
    """Fresh root token."""
    return CancellationToken()


async def settle_after(token: CancellationToken, seconds: float, value: Any = None, error: Exception | None = None) -> Any:
    """
    Well-behaved operation: waits, then returns ``value`` or raises ``error``.

    Fails with a cancellation error as soon as the token is aborted.
    """
    await delay(token, seconds)
    if error is not None:
        raise error
    return value


async def ignore_token(seconds: float, value: Any = None, error: Exception | None = None) -> Any:
    """Operation that does not observe any token."""
    await anyio.sleep(seconds)
    if error is not None:
        raise error
    return value


async def abort_after(token: CancellationToken, seconds: float) -> None:
    """Abort the token after a delay."""
    await anyio.sleep(seconds)
    token.abort()


@asynccontextmanager
async def assert_completes_within(seconds: float):
    """Assert the wrapped block finishes within the given time."""
    start = anyio.current_time()
    yield
    duration = anyio.current_time() - start
    assert duration < seconds, f"Took {duration:.3f}s, expected under {seconds}s"
