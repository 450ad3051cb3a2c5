from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from livetrack.app.ports.output import ITicker, ITickHandle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _LoopTickHandle(ITickHandle):
    loop: asyncio.AbstractEventLoop
    interval_s: float
    callback: Callable[[], None]
    _timer: asyncio.TimerHandle | None = field(default=None, init=False)
    _cancelled: bool = field(default=False, init=False)

    def start(self) -> None:
        self._timer = self.loop.call_later(self.interval_s, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        if self._cancelled:
            return
        try:
            self.callback()
        except Exception:
            logger.exception("Tick callback failed")
        # The callback may have cancelled us.
        if not self._cancelled:
            self.start()


@dataclass(slots=True)
class AsyncioTicker(ITicker):
    """Drives repeating ticks from an asyncio event loop (call_later chain)."""

    loop: asyncio.AbstractEventLoop | None = None

    def _loop(self) -> asyncio.AbstractEventLoop:
        return self.loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self._loop().time()

    def schedule_repeating(
        self, interval_s: float, callback: Callable[[], None]
    ) -> ITickHandle:
        handle = _LoopTickHandle(
            loop=self._loop(), interval_s=max(0.0, float(interval_s)), callback=callback
        )
        handle.start()
        return handle
