# src/study_planner/core/timers.py

"""
Repeating timers.

AsyncioTimer chains loop.call_later() calls on a running event loop.
start_timer_in_background() hosts such a loop in a daemon thread, so the blocking
console REPL can run in the main thread while reminders keep ticking.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


def _in_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


class RepeatingHandle:
    """Handle returned by AsyncioTimer.schedule_repeating()."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_seconds: float,
        callback: Callable[[], Any],
    ) -> None:
        self._loop = loop
        self._interval = interval_seconds
        self._callback = callback
        self._next: asyncio.TimerHandle | None = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _arm(self) -> None:
        if self._cancelled:
            return
        self._next = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Repeating timer callback failed")
        self._arm()

    def cancel(self) -> None:
        self._cancelled = True
        if _in_loop_thread(self._loop):
            self._drop_pending()
            return
        try:
            self._loop.call_soon_threadsafe(self._drop_pending)
        except RuntimeError:
            # Loop already closed: nothing left to fire.
            logger.debug("Timer loop closed before cancel.", exc_info=True)

    def _drop_pending(self) -> None:
        if self._next is not None:
            self._next.cancel()
            self._next = None


class AsyncioTimer:
    """
    Timer port on top of an asyncio event loop.

    The first callback runs after one full interval. If called from another thread,
    scheduling is handed over to the loop thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def schedule_repeating(
        self,
        interval_seconds: float,
        callback: Callable[[], Any],
    ) -> RepeatingHandle:
        interval = float(interval_seconds)
        if interval <= 0:
            raise ValueError("interval_seconds must be positive")

        handle = RepeatingHandle(self._loop, interval, callback)
        if _in_loop_thread(self._loop):
            handle._arm()
        else:
            self._loop.call_soon_threadsafe(handle._arm)
        logger.debug("Repeating timer armed every %.1fs", interval)
        return handle


@dataclass
class BackgroundTimerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event
    timer: AsyncioTimer

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Timer loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_timer_in_background(*, ready_timeout: float = 5.0) -> BackgroundTimerRunner | None:
    """
    Start an event loop in a daemon thread and return a runner exposing its timer.

    Why a thread:
    - console REPL is blocking (input()).
    - timers need a live event loop to fire.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    async def _wait_for_stop(stop_event: asyncio.Event) -> None:
        await stop_event.wait()

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_wait_for_stop(stop_event))
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()
            logger.debug("Timer loop closed.")

    t = threading.Thread(target=runner, name="reminder-timer", daemon=True)
    t.start()

    ready.wait(timeout=ready_timeout)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Timer thread did not initialize properly.")
        return None

    logger.info("Timer background thread started.")
    return BackgroundTimerRunner(thread=t, loop=loop, stop_event=stop_event, timer=AsyncioTimer(loop))
