"""Tests for running coroutines from synchronous code."""

import asyncio
import threading

import pytest

from originprobe.utils.async_utils import safe_async_run


async def _answer(value: int) -> int:
    await asyncio.sleep(0)
    return value


async def _fail() -> None:
    await asyncio.sleep(0)
    raise ValueError("boom")


def test_runs_coroutine_without_loop():
    assert safe_async_run(_answer(42)) == 42


def test_propagates_exception():
    with pytest.raises(ValueError, match="boom"):
        safe_async_run(_fail())


def test_leaves_no_event_loop_behind():
    safe_async_run(_answer(1))
    with pytest.raises(RuntimeError):
        asyncio.get_running_loop()


@pytest.mark.asyncio
async def test_falls_back_to_thread_inside_running_loop():
    seen: list[str] = []

    async def record_thread() -> int:
        seen.append(threading.current_thread().name)
        return 7

    assert safe_async_run(record_thread()) == 7
    assert seen == ["originprobe-loop"]
