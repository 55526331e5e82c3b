"""
eventflow Events — Deferred Listener Completions
==================================================
Listeners may be coroutine functions or return any awaitable.
Dispatch is synchronous and never awaits them inline:

1. Running asyncio loop on this thread → asyncio.ensure_future
2. No running loop → submitted to a background loop thread
3. concurrent.futures.Future → observed as-is

A completion that fails is reported to the diagnostic sink as an
AsyncListenerRejection. Nothing is ever re-raised to the dispatcher's
caller. Only invocation order is guaranteed, not completion order.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
import threading
from functools import partial
from typing import Any, Awaitable, Optional, Set

from eventflow.events.diagnostics import DiagnosticSink, report
from eventflow.events.errors import AsyncListenerRejection
from eventflow.events.registry import Listener

logger = logging.getLogger("eventflow.events")


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


# ══════════════════════════════════════════════════════════════
# BACKGROUND LOOP (dispatch from plain synchronous code)
# ══════════════════════════════════════════════════════════════

class BackgroundLoop:
    """Event loop running in a daemon thread, started on first use."""

    def __init__(self, name: str = "eventflow-loop") -> None:
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def submit(self, awaitable: Awaitable[Any]) -> concurrent.futures.Future:
        loop = self._ensure_started()
        return asyncio.run_coroutine_threadsafe(_await(awaitable), loop)

    def _ensure_started(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=self._run, args=(loop,), name=self._name, daemon=True
                )
                thread.start()
                self._loop = loop
                self._thread = thread
                logger.debug(f"Background loop started ({self._name})")
            return self._loop

    @staticmethod
    def _run(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            try:
                # cancelled tasks resolve their run_coroutine_threadsafe futures
                tasks = asyncio.all_tasks(loop)
                for task in tasks:
                    task.cancel()
                if tasks:
                    loop.run_until_complete(
                        asyncio.gather(*tasks, return_exceptions=True)
                    )
                    logger.debug(
                        f"Cancelled {len(tasks)} pending async listener(s) "
                        f"on background loop shutdown"
                    )
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the loop and join its thread. No-op if never started."""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout)
        logger.debug(f"Background loop stopped ({self._name})")


# ══════════════════════════════════════════════════════════════
# COMPLETION TRACKER
# ══════════════════════════════════════════════════════════════

class DeferredCompletions:
    """
    Schedules awaitable listener results and watches them.

    Pending futures are strongly referenced until done so asyncio
    does not garbage-collect running tasks.
    """

    def __init__(self, sink: DiagnosticSink) -> None:
        self._sink = sink
        self._pending: Set[Any] = set()
        self._cond = threading.Condition()
        self._background = BackgroundLoop()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def track(self, result: Any, event_name: str, listener: Listener) -> bool:
        """
        Schedule result if it is awaitable.

        Returns True if result was a deferred completion.
        """
        if isinstance(result, concurrent.futures.Future):
            self._watch(result, event_name, listener)
            return True

        if not inspect.isawaitable(result):
            return False

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            future = self._background.submit(result)
        else:
            future = asyncio.ensure_future(result)

        self._watch(future, event_name, listener)
        return True

    def _watch(self, future: Any, event_name: str, listener: Listener) -> None:
        with self._cond:
            self._pending.add(future)
        future.add_done_callback(partial(self._on_done, event_name, listener))

    def _on_done(self, event_name: str, listener: Listener, future: Any) -> None:
        try:
            if future.cancelled():
                logger.debug(f"Async listener for '{event_name}' was cancelled")
            else:
                exc = future.exception()
                if exc is not None:
                    report(
                        self._sink,
                        AsyncListenerRejection(event_name, listener, exc),
                    )
        finally:
            # discard after reporting: join()/wait() imply the sink ran
            with self._cond:
                self._pending.discard(future)
                self._cond.notify_all()

    async def wait(self) -> None:
        """Await every completion scheduled on the running loop."""
        loop = asyncio.get_running_loop()
        while True:
            local = [
                f for f in list(self._pending)
                if isinstance(f, asyncio.Future) and f.get_loop() is loop
            ]
            if not local:
                return
            await asyncio.gather(*local, return_exceptions=True)
            # let done callbacks run before re-checking
            await asyncio.sleep(0)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until thread-backed completions finish.

        Returns False if some were still pending after timeout.
        """
        def settled() -> bool:
            return not any(
                isinstance(f, concurrent.futures.Future) for f in self._pending
            )

        with self._cond:
            return self._cond.wait_for(settled, timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        self._background.stop(timeout)
