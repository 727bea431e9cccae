from typing import Any, Callable, Protocol, runtime_checkable


TimerCallback = Callable[[], Any]


@runtime_checkable
class TimerFacility(Protocol):
    """
    Deferred-execution primitive a gate schedules its trailing edge on.

    Times are milliseconds. ``now()`` only has to be monotonic enough for
    spacing decisions; gates tolerate it moving backwards. ``cancel()``
    must guarantee the callback will not run once it returns, and must be
    a no-op for handles that already fired or were cancelled.
    """

    def now(self) -> float: ...

    def schedule_after(
        self,
        callback: TimerCallback,
        delay_ms: float,
    ) -> Any: ...

    def cancel(self, handle: Any) -> None: ...
