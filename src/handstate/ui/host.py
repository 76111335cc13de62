"""
Display Host
============

OpenCV window acting as the UI thread: runs display-synchronized callbacks
once per refresh, shows the composed image and dispatches key presses.
Between refreshes it yields to the event loop so model loading and webcam
requests can progress.
"""

import asyncio
import inspect
import logging
import time
from typing import Callable, Dict, Iterable, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)

KEY_ESC = 27
KEY_SPACE = 32


class DisplayHost:
    """
    Cooperative single-threaded host loop.

    Example:
        >>> host = DisplayHost("Hand State")
        >>> host.bind_key([ord("q"), KEY_ESC], host.stop)
        >>> host.request_animation_frame(scheduler.tick)
        >>> await host.run(lambda: surface.render(status))
    """

    def __init__(self, window_name: str = "Hand State Demo", refresh_hz: float = 60.0):
        self.window_name = window_name
        self.refresh_hz = refresh_hz
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._next_handle = 1
        self._key_handlers: Dict[int, Callable] = {}
        self._running = False
        self._pending_tasks = set()

    @property
    def running(self) -> bool:
        return self._running

    def request_animation_frame(self, callback: Callable[[], None]) -> int:
        """Run callback once, on the next refresh. Returns a cancel handle."""
        handle = self._next_handle
        self._next_handle += 1
        self._callbacks[handle] = callback
        return handle

    def cancel_animation_frame(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._callbacks.pop(handle, None)

    def bind_key(self, keys: Iterable[int], handler: Callable) -> None:
        """Bind a handler (plain or coroutine function) to key codes."""
        for key in keys:
            self._key_handlers[key] = handler

    def run_animation_frames(self) -> int:
        """Run callbacks queued before this refresh. Returns how many ran."""
        callbacks, self._callbacks = self._callbacks, {}
        for callback in callbacks.values():
            try:
                callback()
            except Exception:
                logger.exception("Animation frame callback failed")
        return len(callbacks)

    def dispatch_key(self, key: int) -> bool:
        """Invoke the handler bound to key, if any."""
        handler = self._key_handlers.get(key)
        if handler is None:
            return False
        result = handler()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending_tasks.add(task)
            task.add_done_callback(self._pending_tasks.discard)
        return True

    def stop(self) -> None:
        self._running = False

    async def wait_pending(self) -> None:
        """Wait for coroutine key handlers that are still running."""
        if self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    async def run(self, present: Callable[[], np.ndarray]) -> None:
        """
        Main display loop.

        Args:
            present: Returns the BGR image to show after callbacks ran
        """
        interval = 1.0 / self.refresh_hz
        self._running = True
        logger.info(f"Display host running at {self.refresh_hz:.0f} Hz")

        try:
            while self._running:
                started = time.perf_counter()

                self.run_animation_frames()
                cv2.imshow(self.window_name, present())

                key = cv2.waitKey(1) & 0xFF
                if key != 0xFF:
                    self.dispatch_key(key)

                elapsed = time.perf_counter() - started
                await asyncio.sleep(max(0.0, interval - elapsed))
        finally:
            self._running = False
            cv2.destroyAllWindows()
