"""Tests for the bounded polling wait."""

import pytest

from fact_scraper.errors import WaitTimeoutError
from fact_scraper.utils.waiting import wait_until


class Counter:
    def __init__(self, succeed_on, value="found"):
        self.calls = 0
        self.succeed_on = succeed_on
        self.value = value

    async def __call__(self):
        self.calls += 1
        return self.value if self.calls >= self.succeed_on else None


@pytest.mark.asyncio
async def test_returns_first_truthy_value():
    predicate = Counter(succeed_on=3)
    result = await wait_until(predicate, timeout_ms=2000, initial_delay_ms=1)

    assert result == "found"
    assert predicate.calls == 3


@pytest.mark.asyncio
async def test_zero_timeout_still_checks_once():
    predicate = Counter(succeed_on=1)
    assert await wait_until(predicate, timeout_ms=0) == "found"
    assert predicate.calls == 1


@pytest.mark.asyncio
async def test_times_out_with_wait_timeout_error():
    predicate = Counter(succeed_on=10_000)
    with pytest.raises(WaitTimeoutError) as exc_info:
        await wait_until(predicate, timeout_ms=30, description="never", initial_delay_ms=5)

    assert exc_info.value.timeout_ms == 30
    assert "never" in str(exc_info.value)
    assert predicate.calls >= 1


@pytest.mark.asyncio
async def test_predicate_errors_count_as_failed_attempts():
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 2:
            raise RuntimeError("page is navigating")
        return True

    assert await wait_until(flaky, timeout_ms=1000, initial_delay_ms=1) is True
    assert len(calls) == 2
