"""
Tests for delay, forever and abortable.
"""

import anyio
import pytest

from hother.abortable import CancellationError, CancellationToken, abortable, delay, forever
from tests.conftest import abort_after, assert_completes_within


class TestDelay:
    """Test abortable sleeping."""

    @pytest.mark.anyio
    async def test_elapses(self, token):
        start = anyio.current_time()
        await delay(token, 0.05)

        assert anyio.current_time() - start >= 0.04
        assert not token.is_aborted

    @pytest.mark.anyio
    async def test_zero_delay(self, token):
        with anyio.fail_after(0.5):
            await delay(token, 0)

    @pytest.mark.anyio
    async def test_already_aborted(self, token):
        token.abort()

        with pytest.raises(CancellationError):
            await delay(token, 10)

    @pytest.mark.anyio
    async def test_interrupted_by_abort(self, token):
        async with assert_completes_within(0.5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(abort_after, token, 0.05)
                with pytest.raises(CancellationError):
                    await delay(token, 10)


class TestForever:
    """Test waiting until abort."""

    @pytest.mark.anyio
    async def test_fails_on_abort(self, token):
        async with anyio.create_task_group() as tg:
            tg.start_soon(abort_after, token, 0.02)
            with pytest.raises(CancellationError):
                await forever(token)


class TestAbortable:
    """Test wrapping token-unaware awaitables."""

    @pytest.mark.anyio
    async def test_returns_result(self, token):
        async def compute():
            await anyio.sleep(0.01)
            return 42

        assert await abortable(token, compute()) == 42
        assert token.listener_count == 0

    @pytest.mark.anyio
    async def test_propagates_errors(self, token):
        async def broken():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await abortable(token, broken())

    @pytest.mark.anyio
    async def test_stops_work_on_abort(self, token):
        finished = False

        async def slow():
            nonlocal finished
            await anyio.sleep(10)
            finished = True

        async with assert_completes_within(0.5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(abort_after, token, 0.05)
                with pytest.raises(CancellationError):
                    await abortable(token, slow())

        assert not finished
        assert token.listener_count == 0

    @pytest.mark.anyio
    async def test_already_aborted_does_not_start_work(self, token):
        started = False

        async def work():
            nonlocal started
            started = True

        token.abort()

        with pytest.raises(CancellationError):
            await abortable(token, work())

        assert not started
