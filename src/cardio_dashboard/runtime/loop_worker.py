"""Background asyncio event loop hosted in a QThread.

The dashboard controller and every coroutine it starts live on this one loop,
so all state transitions happen on a single thread. The GUI thread only
submits work and receives snapshots back through Qt signals.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import threading
from typing import Any, Callable

from loguru import logger
from PySide6.QtCore import QThread, Signal

from cardio_dashboard.core.errors import DashboardError


class EventLoopWorker(QThread):
    """Runs an asyncio loop forever until stop() is called.

    Signals:
        loop_ready: Emitted once the loop is running and accepts work
    """

    loop_ready = Signal()

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ready = threading.Event()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("Event loop is not running; call start() first")
        return self._loop

    def run(self):
        """Own a fresh event loop for the lifetime of the thread."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        logger.info("Event loop worker started")
        loop.call_soon(self._mark_ready)
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()
            self._loop = None
            logger.info("Event loop worker stopped")

    def _mark_ready(self):
        self._ready.set()
        self.loop_ready.emit()

    def wait_ready(self, timeout: float | None = None) -> bool:
        """Block until the loop accepts work."""
        return self._ready.wait(timeout)

    def submit(self, func: Callable[..., Any], *args: Any) -> concurrent.futures.Future:
        """Run func(*args) on the loop thread; coroutine results are awaited.

        DashboardError is already recorded in the controller's error slot, so
        it is logged here and not propagated. Any other exception is logged
        and left on the returned future.
        """
        return asyncio.run_coroutine_threadsafe(self._call(func, args), self.loop)

    async def _call(self, func: Callable[..., Any], args: tuple) -> Any:
        name = getattr(func, "__name__", repr(func))
        try:
            result = func(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        except DashboardError as e:
            logger.debug(f"{name}: {e}")
            return None
        except Exception:
            logger.exception(f"{name} raised unexpectedly")
            raise

    def stop(self, before_stop: Callable[[], Any] | None = None, timeout: float = 5.0) -> None:
        """Optionally run a final coroutine function, then stop the loop and join."""
        if self._loop is None:
            return
        if before_stop is not None:
            try:
                self.submit(before_stop).result(timeout)
            except concurrent.futures.TimeoutError:
                logger.warning("Shutdown hook did not finish in time")
        self._loop.call_soon_threadsafe(self._loop.stop)
        self.wait()
