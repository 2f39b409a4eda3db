"""Run scan coroutines from the synchronous CLI."""

import asyncio
import signal
import sys
import threading
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar, cast

T = TypeVar("T")

_INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _can_install_handlers() -> bool:
    return sys.platform != "win32" and threading.current_thread() is threading.main_thread()


@contextmanager
def _cancel_on_interrupt(loop: asyncio.AbstractEventLoop) -> Iterator[threading.Event]:
    """Cancel every task on ``loop`` when SIGINT/SIGTERM arrives.

    Yields an event that is set once an interrupt was received.
    """
    interrupted = threading.Event()
    if not _can_install_handlers():
        yield interrupted
        return

    def handler(signum: int, frame: Any) -> None:
        interrupted.set()
        for task in asyncio.all_tasks(loop):
            task.cancel()

    previous = {sig: signal.signal(sig, handler) for sig in _INTERRUPT_SIGNALS}
    try:
        yield interrupted
    finally:
        for sig, old in previous.items():
            if old is not None:
                signal.signal(sig, old)


def _drain(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel leftover tasks, then close async generators and the executor."""
    pending = asyncio.all_tasks(loop)
    for task in pending:
        task.cancel()
    if pending:
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))

    for shutdown in (loop.shutdown_asyncgens, loop.shutdown_default_executor):
        try:
            loop.run_until_complete(shutdown())
        except RuntimeError:
            pass


def _run_in_fresh_loop(coro: Coroutine[Any, Any, T]) -> T:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        with _cancel_on_interrupt(loop) as interrupted:
            try:
                return loop.run_until_complete(coro)
            except asyncio.CancelledError:
                if interrupted.is_set():
                    raise KeyboardInterrupt from None
                raise
    finally:
        try:
            _drain(loop)
        finally:
            asyncio.set_event_loop(None)
            loop.close()


def safe_async_run(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run ``coro`` to completion and return its result.

    Ctrl-C cancels the scan's tasks and surfaces as KeyboardInterrupt. When a
    loop is already running in this thread (pytest-asyncio, notebooks) the
    coroutine gets its own loop on a helper thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_in_fresh_loop(coro)

    outcome: dict[str, Any] = {}

    def _runner() -> None:
        try:
            outcome["result"] = _run_in_fresh_loop(coro)
        except BaseException as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=_runner, name="originprobe-loop", daemon=True)
    worker.start()
    worker.join()

    if "error" in outcome:
        raise outcome["error"]
    return cast(T, outcome.get("result"))
