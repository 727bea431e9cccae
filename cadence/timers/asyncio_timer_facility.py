import asyncio
import time

from .timer_facility import TimerCallback


class AsyncioTimerFacility:
    """
    Timer facility backed by ``loop.call_later``.

    The loop is resolved when the first timer is scheduled, so gates can
    be built at import time (e.g. as decorators) before any loop runs.
    Callback exceptions are not caught here and reach the loop's
    exception handler.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def now(self) -> float:
        if self._loop is None:
            # Matches the default loop clock.
            return time.monotonic() * 1000

        return self._loop.time() * 1000

    def schedule_after(
        self,
        callback: TimerCallback,
        delay_ms: float,
    ) -> asyncio.TimerHandle:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.get_running_loop()

        return self._loop.call_later(
            max(delay_ms, 0) / 1000,
            callback,
        )

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
