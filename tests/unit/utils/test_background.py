"""Tests for BackgroundDispatcher."""

import asyncio

import pytest

from codedrafts_auth.utils.background import BackgroundDispatcher


@pytest.mark.asyncio
async def test_spawn_runs_without_blocking_caller():
    dispatcher = BackgroundDispatcher()
    started = asyncio.Event()
    release = asyncio.Event()

    async def side_effect():
        started.set()
        await release.wait()

    dispatcher.spawn(side_effect(), description="slow")
    await started.wait()
    assert dispatcher.pending == 1

    release.set()
    await dispatcher.drain()
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_failure_is_logged_not_raised(mocker):
    dispatcher = BackgroundDispatcher()
    logger = mocker.patch("codedrafts_auth.utils.background.logger")
    error_log = logger.error

    async def boom():
        raise RuntimeError("mail provider outage")

    task = dispatcher.spawn(boom(), description="send_email")
    await dispatcher.drain()

    assert task.exception() is None
    error_log.assert_called_once()
    assert error_log.call_args.kwargs["task"] == "send_email"
    assert error_log.call_args.kwargs["error_type"] == "RuntimeError"


@pytest.mark.asyncio
async def test_drain_without_tasks():
    await BackgroundDispatcher().drain()
