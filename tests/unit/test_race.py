"""
Tests for the abortable race combinator.
"""

import anyio
import pytest

from hother.abortable import CancellationError, CancellationToken, abortable_race, delay, forever
from tests.conftest import abort_after, assert_completes_within, ignore_token, settle_after


class TestRaceResults:
    """Test winners of a race."""

    @pytest.mark.anyio
    async def test_first_fulfillment_wins(self, token):
        async with assert_completes_within(0.5):
            result = await abortable_race(
                token,
                lambda child: [
                    settle_after(child, 10, "slow"),
                    settle_after(child, 0.01, "fast"),
                ],
            )

        assert result == "fast"
        assert not token.is_aborted

    @pytest.mark.anyio
    async def test_first_settlement_aborts_siblings(self, token):
        children = []
        observed = []

        async def watcher(child):
            try:
                await forever(child)
            except CancellationError:
                observed.append("cancelled")
                raise

        def executor(child):
            children.append(child)
            return [settle_after(child, 0.01, "done"), watcher(child)]

        assert await abortable_race(token, executor) == "done"
        assert children[0].is_aborted
        assert observed == ["cancelled"]

    @pytest.mark.anyio
    async def test_genuine_error_overrides_earlier_fulfillment(self, token):
        with pytest.raises(ValueError, match="real failure"):
            await abortable_race(
                token,
                lambda child: [
                    settle_after(child, 0.01, "quick"),
                    ignore_token(0.03, error=ValueError("real failure")),
                ],
            )

    @pytest.mark.anyio
    async def test_first_genuine_error_wins(self, token):
        with pytest.raises(ValueError, match="first"):
            await abortable_race(
                token,
                lambda child: [
                    settle_after(child, 0.01, error=ValueError("first")),
                    ignore_token(0.03, error=RuntimeError("second")),
                ],
            )

    @pytest.mark.anyio
    async def test_fulfillment_beats_cancellation(self, token):
        async def cancelled_immediately():
            raise CancellationError()

        result = await abortable_race(
            token,
            lambda child: [
                cancelled_immediately(),
                ignore_token(0.02, "finished anyway"),
            ],
        )

        assert result == "finished anyway"

    @pytest.mark.anyio
    async def test_timeout_pattern(self, token):
        async def timeout(child: CancellationToken, seconds: float) -> str:
            await delay(child, seconds)
            return "timeout"

        async with assert_completes_within(0.5):
            result = await abortable_race(
                token,
                lambda child: [
                    timeout(child, 0.02),
                    settle_after(child, 10, "response"),
                ],
            )

        assert result == "timeout"

    @pytest.mark.anyio
    async def test_listener_removed(self, token):
        await abortable_race(token, lambda child: [settle_after(child, 0, 1)])

        assert token.listener_count == 0


class TestRaceCancellation:
    """Test cancellation of the aggregate."""

    @pytest.mark.anyio
    async def test_empty_is_an_error(self, token):
        with pytest.raises(ValueError):
            await abortable_race(token, lambda child: [])

        assert token.listener_count == 0

    @pytest.mark.anyio
    async def test_already_aborted_skips_executor(self, token):
        called = False

        def executor(child):
            nonlocal called
            called = True
            return []

        token.abort()

        with pytest.raises(CancellationError):
            await abortable_race(token, executor)

        assert not called

    @pytest.mark.anyio
    async def test_outer_abort_cancels_members(self, token):
        children = []

        def executor(child):
            children.append(child)
            return [forever(child), settle_after(child, 10, "never")]

        async with assert_completes_within(0.5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(abort_after, token, 0.02)
                with pytest.raises(CancellationError):
                    await abortable_race(token, executor)

        assert children[0].is_aborted
        assert token.listener_count == 0
