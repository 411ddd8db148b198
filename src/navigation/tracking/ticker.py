# ticker.py
# Shared frame-tick scheduler.
# Every per-frame callback of a session advances on the same display
# tick. Hosts either call tick(dt) from their own render
# loop or let run() drive it from an asyncio task.

import asyncio
import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]


class TickHandle:
    """Registration returned by DisplayTicker.register()."""

    def __init__(self, ticker: "DisplayTicker", callback: TickCallback) -> None:
        self._ticker = ticker
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Stop receiving ticks. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._ticker._remove(self)


class DisplayTicker:
    """Calls every registered callback once per frame with the frame interval."""

    def __init__(self, frame_rate_hz: float = 60.0) -> None:
        if frame_rate_hz <= 0:
            raise ValueError("frame_rate_hz must be positive")
        self.frame_rate_hz = frame_rate_hz
        self._handles: List[TickHandle] = []
        self.running = False
        self.task: Optional[asyncio.Task] = None

    @property
    def frame_interval_s(self) -> float:
        return 1.0 / self.frame_rate_hz

    def register(self, callback: TickCallback) -> TickHandle:
        handle = TickHandle(self, callback)
        self._handles.append(handle)
        return handle

    def _remove(self, handle: TickHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    @property
    def registration_count(self) -> int:
        return len(self._handles)

    def tick(self, dt: Optional[float] = None) -> None:
        """Advance every registered callback by dt seconds (one frame by default)."""
        if dt is None:
            dt = self.frame_interval_s
        # Callbacks registered during this tick start on the next one.
        for handle in list(self._handles):
            if handle.active:
                handle.callback(dt)

    async def start(self) -> None:
        """Start the tick loop as a background task."""
        if self.running:
            return
        self.running = True
        self.task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the tick loop."""
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None

    async def run(self) -> None:
        """Tick loop - runs at frame_rate_hz with the measured frame interval."""
        self.running = True
        last = time.monotonic()
        try:
            while self.running:
                await asyncio.sleep(self.frame_interval_s)
                now = time.monotonic()
                self.tick(now - last)
                last = now
        except asyncio.CancelledError:
            logger.debug("Display ticker cancelled")
            raise
