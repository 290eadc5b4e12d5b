"""
Tests for retry and timeout helpers.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from web_replay.exceptions import ExecutorUnavailableError
from web_replay.utils.retry import RetryConfig, retry_async, with_timeout


def recording_sleep():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return sleep, delays


class TestRetryAsync:
    """Test bounded retries."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        func = AsyncMock(return_value="ok")
        sleep, delays = recording_sleep()

        result = await retry_async(func, RetryConfig(sleep=sleep), "a", key="b")

        assert result == "ok"
        func.assert_awaited_once_with("a", key="b")
        assert delays == []

    @pytest.mark.asyncio
    async def test_one_retry_with_hook_and_delay(self):
        func = AsyncMock(side_effect=[ExecutorUnavailableError("navigating"), "ok"])
        hook = MagicMock()
        sleep, delays = recording_sleep()
        config = RetryConfig(delay_ms=250, on_retry=hook, sleep=sleep)

        assert await retry_async(func, config) == "ok"

        assert func.await_count == 2
        hook.assert_called_once()
        assert hook.call_args.args[0] == 1
        assert delays == [0.25]

    @pytest.mark.asyncio
    async def test_async_hook_awaited(self):
        func = AsyncMock(side_effect=[ExecutorUnavailableError("gone"), "ok"])
        hook = AsyncMock()
        sleep, _ = recording_sleep()

        await retry_async(func, RetryConfig(on_retry=hook, sleep=sleep))

        hook.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_last_error_raised(self):
        func = AsyncMock(side_effect=ExecutorUnavailableError("gone"))
        sleep, delays = recording_sleep()

        with pytest.raises(ExecutorUnavailableError):
            await retry_async(func, RetryConfig(max_attempts=3, sleep=sleep))

        assert func.await_count == 3
        assert len(delays) == 2

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        func = AsyncMock(side_effect=ValueError("bad payload"))
        sleep, _ = recording_sleep()

        with pytest.raises(ValueError):
            await retry_async(func, RetryConfig(retry_on=(ExecutorUnavailableError,), sleep=sleep))

        assert func.await_count == 1


class TestWithTimeout:
    """Test deadlines."""

    @pytest.mark.asyncio
    async def test_result_returned(self):
        async def quick():
            return 42

        assert await with_timeout(quick(), 1) == 42

    @pytest.mark.asyncio
    async def test_timeout_message(self):
        with pytest.raises(asyncio.TimeoutError, match="resolution timed out"):
            await with_timeout(asyncio.sleep(1), 0.01, "resolution timed out")
