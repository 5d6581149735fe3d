"""Run a scan coroutine to completion from synchronous code."""

import asyncio
import signal
import sys
import threading
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

T = TypeVar("T")

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _can_install_handlers() -> bool:
    return sys.platform != "win32" and threading.current_thread() is threading.main_thread()


@contextmanager
def _cancel_on_signals(loop: asyncio.AbstractEventLoop) -> Iterator[threading.Event]:
    """Turn SIGINT/SIGTERM into task cancellation for the duration of the block.

    The yielded event is set once a signal arrived.
    """
    received = threading.Event()
    if not _can_install_handlers():
        yield received
        return

    def handle(signum: int, frame: Any) -> None:
        received.set()
        for task in asyncio.all_tasks(loop):
            task.cancel()

    previous = {signum: signal.signal(signum, handle) for signum in STOP_SIGNALS}
    try:
        yield received
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


def _shutdown(loop: asyncio.AbstractEventLoop) -> None:
    """Unwind analyzer tasks a timed-out scan left behind, then close the loop."""
    try:
        leftovers = asyncio.all_tasks(loop)
        for task in leftovers:
            task.cancel()
        if leftovers:
            loop.run_until_complete(asyncio.gather(*leftovers, return_exceptions=True))
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.run_until_complete(loop.shutdown_default_executor())
    finally:
        asyncio.set_event_loop(None)
        loop.close()


def _run_in_fresh_loop(coro: Coroutine[Any, Any, T]) -> T:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    with _cancel_on_signals(loop) as interrupted:
        try:
            return loop.run_until_complete(coro)
        except asyncio.CancelledError:
            if interrupted.is_set():
                raise KeyboardInterrupt from None
            raise
        finally:
            _shutdown(loop)


def safe_async_run(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run *coro* on its own event loop and tear the loop down cleanly.

    When this thread already runs a loop (pytest-asyncio, notebooks) the
    coroutine gets a worker thread instead.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_in_fresh_loop(coro)

    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["result"] = _run_in_fresh_loop(coro)
        except BaseException as exc:
            outcome["error"] = exc

    thread = threading.Thread(target=worker, name="autosecscan-loop", daemon=True)
    thread.start()
    thread.join()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]
