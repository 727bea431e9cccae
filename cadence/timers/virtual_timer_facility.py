import heapq
from dataclasses import dataclass, field

from .timer_facility import TimerCallback


@dataclass(order=True)
class VirtualTimer:
    due: float
    sequence: int
    callback: TimerCallback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)


class VirtualTimerFacility:
    """
    Deterministic, manually driven clock.

    Nothing runs until the clock is moved with ``advance`` or
    ``advance_to``; due timers then fire in (due time, scheduling order)
    with ``now()`` reading each timer's due time while it runs. Timers
    scheduled from inside a callback fire in the same pass if they fall
    due before the target time. ``set_time`` moves the clock without
    running anything, which models a blocked loop or a clock jump.

    Callback exceptions propagate out of ``advance``/``advance_to``; the
    raising timer is consumed, later timers stay queued.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._timers: list[VirtualTimer] = []
        self._sequence = 0

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    @property
    def next_due(self) -> float | None:
        self._discard_cancelled()
        if not self._timers:
            return None

        return self._timers[0].due

    def schedule_after(
        self,
        callback: TimerCallback,
        delay_ms: float,
    ) -> VirtualTimer:
        self._sequence += 1
        timer = VirtualTimer(
            due=self._now + max(delay_ms, 0),
            sequence=self._sequence,
            callback=callback,
        )

        heapq.heappush(self._timers, timer)
        return timer

    def cancel(self, handle: VirtualTimer) -> None:
        handle.cancelled = True

    def set_time(self, timestamp: float) -> None:
        self._now = float(timestamp)

    def advance(self, delay_ms: float) -> int:
        return self.advance_to(self._now + delay_ms)

    def advance_to(self, timestamp: float) -> int:
        """Run every timer due at or before ``timestamp``; returns how many fired."""
        fired = 0

        while True:
            self._discard_cancelled()
            if not self._timers or self._timers[0].due > timestamp:
                break

            timer = heapq.heappop(self._timers)
            timer.fired = True
            fired += 1

            self._now = max(self._now, timer.due)
            timer.callback()

        self._now = max(self._now, float(timestamp))
        return fired

    def run_all(self, limit: int = 10_000) -> int:
        """Fire timers until none remain, guarding against self-rearming loops."""
        fired = 0
        while (due := self.next_due) is not None:
            if fired >= limit:
                raise RuntimeError(
                    f"Timers still pending after {limit} firings"
                )

            fired += self.advance_to(due)

        return fired

    def _discard_cancelled(self) -> None:
        while self._timers and self._timers[0].cancelled:
            heapq.heappop(self._timers)
