"""Tests for retry and polling utilities."""
import time

import httpx
import pytest

from jamf_state.utils.connection import (
    RETRYABLE_EXCEPTIONS,
    poll_until,
    with_retry,
)


class TestWithRetry:
    """Tests for retry decorator."""

    @pytest.mark.asyncio
    async def test_async_success_no_retry(self):
        """Successful async function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        async def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        result = await succeeding_func()
        assert result == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_async_retry_then_success(self):
        """Async function retries on transport failure then succeeds."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def failing_then_succeeding():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise httpx.ConnectError("Connection refused")
            return "success"

        result = await failing_then_succeeding()
        assert result == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_async_max_retries_exceeded(self):
        """Async function raises after max retries."""
        call_count = 0

        @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.1)
        async def always_failing():
            nonlocal call_count
            call_count += 1
            raise TimeoutError("Always times out")

        with pytest.raises(TimeoutError):
            await always_failing()
        assert call_count == 3

    def test_sync_success_no_retry(self):
        """Successful sync function doesn't retry."""
        call_count = 0

        @with_retry(max_attempts=3)
        def succeeding_func():
            nonlocal call_count
            call_count += 1
            return "success"

        assert succeeding_func() == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_api_errors_not_retried(self):
        """Anything but a transport failure is raised at once."""
        call_count = 0

        @with_retry(max_attempts=3)
        async def raising_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not retryable")

        with pytest.raises(ValueError):
            await raising_value_error()
        assert call_count == 1


class TestRetryableExceptions:
    """Tests for retryable exceptions list."""

    def test_transport_errors_are_retryable(self):
        """httpx transport failures are retryable."""
        assert httpx.TransportError in RETRYABLE_EXCEPTIONS

    def test_http_status_errors_are_not(self):
        """A 4xx/5xx answer is not a transport failure."""
        assert not issubclass(httpx.HTTPStatusError, RETRYABLE_EXCEPTIONS)

    def test_timeout_is_retryable(self):
        """TimeoutError is retryable."""
        assert TimeoutError in RETRYABLE_EXCEPTIONS


class TestPollUntil:
    """Tests for the polling helper."""

    @pytest.mark.asyncio
    async def test_returns_true_when_probe_passes(self):
        """Polling stops at the first success."""
        results = [False, False, True]

        async def probe():
            return results.pop(0)

        assert await poll_until(probe, timeout=5, interval=0.01) is True
        assert results == []

    @pytest.mark.asyncio
    async def test_gives_up_after_timeout(self):
        """Polling returns False once the timeout passes."""
        calls = 0

        async def probe():
            nonlocal calls
            calls += 1
            return False

        start = time.monotonic()
        assert await poll_until(probe, timeout=0.1, interval=0.02) is False
        assert calls >= 2
        assert time.monotonic() - start < 2

    @pytest.mark.asyncio
    async def test_interval_capped_by_timeout(self):
        """A long interval does not outlast a short timeout."""
        async def probe():
            return False

        start = time.monotonic()
        assert await poll_until(probe, timeout=0.05, interval=30) is False
        assert time.monotonic() - start < 2
