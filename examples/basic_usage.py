#!/usr/bin/env python3
"""
Basic usage examples for abortable tokens, retry and combinators.
"""

import random

import anyio

from hother.abortable import CancellationError, CancellationToken, abortable_all, abortable_race, delay, retry
from hother.abortable.utils.logging import configure_logging, get_logger

# Configure logging
configure_logging(log_level="INFO")
logger = get_logger(__name__)


async def download(token: CancellationToken, name: str, seconds: float) -> str:
    """Simulate a download that observes its token."""
    await delay(token, seconds)
    return f"{name} ({seconds:.1f}s)"


async def example_all():
    """Example: Join several downloads."""
    print("\n=== All Example ===")

    token = CancellationToken()
    results = await abortable_all(
        token,
        lambda child: [download(child, "index.html", 0.3), download(child, "style.css", 0.1)],
    )
    print(f"Downloaded: {results}")


async def example_timeout():
    """Example: Timeout built from a race."""
    print("\n=== Timeout Example ===")

    async def timeout(child: CancellationToken, seconds: float) -> None:
        await delay(child, seconds)

    token = CancellationToken()
    result = await abortable_race(token, lambda child: [timeout(child, 0.5), download(child, "video.mp4", 5.0)])
    print("Timed out" if result is None else f"Downloaded: {result}")


async def example_retry():
    """Example: Retry a flaky download with backoff."""
    print("\n=== Retry Example ===")

    async def flaky(token: CancellationToken, attempt: int) -> str:
        if random.random() < 0.6:
            raise ConnectionError(f"connection reset on attempt {attempt}")
        return await download(token, "data.json", 0.1)

    token = CancellationToken()
    result = await retry(
        token,
        flaky,
        base_ms=100,
        max_attempts=6,
        on_error=lambda error, attempt, delay_ms: print(f"  {error}, retrying in {delay_ms:.0f}ms"),
    )
    print(f"Result: {result}")


async def example_manual_abort():
    """Example: Abort everything from outside."""
    print("\n=== Manual Abort Example ===")

    token = CancellationToken()

    async def stop_soon():
        await anyio.sleep(0.2)
        print("Aborting...")
        token.abort("User requested cancellation")

    async with anyio.create_task_group() as tg:
        tg.start_soon(stop_soon)
        try:
            await abortable_all(token, lambda child: [download(child, "a", 2.0), download(child, "b", 3.0)])
        except CancellationError as e:
            print(f"  Cancelled: {e.message}")


async def main():
    await example_all()
    await example_timeout()
    try:
        await example_retry()
    except ConnectionError as e:
        print(f"  Gave up: {e}")
    await example_manual_abort()


if __name__ == "__main__":
    anyio.run(main)
