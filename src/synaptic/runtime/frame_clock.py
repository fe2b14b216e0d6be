"""Frame clocks - "call me on the next frame" with a cancellation token.

The engine registers one callback per frame and must cancel the pending
registration on teardown, otherwise the per-frame cost outlives the view.
"""

import asyncio
from collections.abc import Callable
from typing import Protocol

from synaptic.config import settings

FrameCallback = Callable[[], None]


class FrameHandle(Protocol):
    def cancel(self) -> None: ...


class FrameClock(Protocol):
    """Host frame clock."""

    def request_frame(self, callback: FrameCallback) -> FrameHandle: ...


class AsyncioFrameClock:
    """Frame clock backed by the running asyncio loop at a fixed rate."""

    def __init__(self, fps: float | None = None, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.fps = fps or settings.fps
        self.interval = 1.0 / self.fps
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, callback)


class _ManualHandle:
    __slots__ = ("callback", "cancelled")

    def __init__(self, callback: FrameCallback) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualFrameClock:
    """
    Frame clock driven explicitly by the host.

    Useful for headless hosts and tests: nothing runs until `advance`.
    """

    def __init__(self) -> None:
        self._queue: list[_ManualHandle] = []
        self.frames = 0

    def request_frame(self, callback: FrameCallback) -> _ManualHandle:
        handle = _ManualHandle(callback)
        self._queue.append(handle)
        return handle

    @property
    def pending(self) -> int:
        """Registered, not-cancelled callbacks waiting for the next frame."""
        return sum(1 for h in self._queue if not h.cancelled)

    def advance(self, frames: int = 1) -> int:
        """
        Fire `frames` frames. Callbacks registered during a frame run on the next one.

        Returns:
            Number of callbacks invoked
        """
        invoked = 0
        for _ in range(frames):
            due, self._queue = self._queue, []
            self.frames += 1
            for handle in due:
                if handle.cancelled:
                    continue
                handle.callback()
                invoked += 1
        return invoked
