"""
Unit tests for the cooperative cancellation token.
"""

import asyncio

import pytest

from subnetbox.commands.cancellation import (
    REASON_CANCELLED,
    REASON_DEADLINE,
    CancelToken,
)
from subnetbox.commands.errors import BootstrapCancelledError, BootstrapError


@pytest.mark.asyncio
async def test_new_token_is_not_cancelled():
    token = CancelToken()
    assert token.cancelled is False
    assert token.reason is None
    token.raise_if_cancelled()


@pytest.mark.asyncio
async def test_cancel_keeps_first_reason():
    token = CancelToken()
    token.cancel("received SIGINT")
    token.cancel()
    assert token.cancelled is True
    assert token.reason == "received SIGINT"


@pytest.mark.asyncio
async def test_raise_if_cancelled():
    token = CancelToken()
    token.cancel()
    with pytest.raises(BootstrapCancelledError) as exc_info:
        token.raise_if_cancelled()
    assert exc_info.value.reason == REASON_CANCELLED
    assert exc_info.value.code == "CANCELLED"
    assert isinstance(exc_info.value, BootstrapError)


@pytest.mark.asyncio
async def test_sleep_returns_after_interval():
    token = CancelToken()
    await token.sleep(0.001)
    assert token.cancelled is False


@pytest.mark.asyncio
async def test_sleep_is_woken_by_cancel():
    token = CancelToken()
    loop = asyncio.get_running_loop()
    loop.call_later(0.01, token.cancel)
    started = loop.time()
    with pytest.raises(BootstrapCancelledError):
        await token.sleep(30.0)
    assert loop.time() - started < 5.0


@pytest.mark.asyncio
async def test_deadline_fires():
    token = CancelToken(timeout=0.01)
    with pytest.raises(BootstrapCancelledError) as exc_info:
        await token.sleep(30.0)
    assert exc_info.value.reason == REASON_DEADLINE
    assert token.reason == REASON_DEADLINE


@pytest.mark.asyncio
async def test_zero_timeout_means_no_deadline():
    token = CancelToken(timeout=0)
    await token.sleep(0.001)
    assert token.cancelled is False
