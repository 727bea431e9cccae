"""
Invocation gate.

One gate owns all timing state for one wrapped callable and decides, per
call, whether to invoke now (leading edge), defer to a timer (trailing
edge) or do nothing but remember the latest arguments. Calls return the
result of the most recent completed invocation, which may predate the
call.

Everything runs on a single cooperative context (one asyncio loop, or
one virtual clock driver), so no locking is done. Re-entrant calls from
inside the wrapped callable are fine: the gate commits its state before
invoking.
"""

from dataclasses import replace
from typing import Any, Callable, Generic, TypeVar

from cadence.env import TimeParser
from cadence.logging import (
    GateDebug,
    GateError,
    GateTrace,
    Log,
    LoggerStream,
    LogLevel,
    PolicyWarn,
)
from cadence.timers import AsyncioTimerFacility, TimerFacility

from .edge_policy import EdgePolicy, normalize_wait
from .gate_state import GateState


R = TypeVar("R")


class InvocationGate(Generic[R]):
    """
    Debounce/throttle state machine for one callable.

    Example usage:
        timers = VirtualTimerFacility()
        gate = InvocationGate(save, wait=100, timers=timers)

        gate.call(("draft-1",))
        gate.call(("draft-2",))
        timers.advance(100)  # save("draft-2") runs once

    ``wait`` and the policy's ``max_wait`` take milliseconds or duration
    strings (``"250ms"``, ``"1.5s"``). Out-of-range values are normalized
    and logged, never rejected.
    """

    def __init__(
        self,
        func: Callable[..., R],
        wait: float | int | str = 0,
        policy: EdgePolicy | None = None,
        timers: TimerFacility | None = None,
        name: str | None = None,
        logger: LoggerStream | None = None,
    ) -> None:
        if not callable(func):
            raise TypeError(f"Expected a callable, got {type(func).__name__}")

        self._func = func
        self._name = name or getattr(func, "__qualname__", None) or repr(func)
        self._logger = logger or LoggerStream(name="cadence")
        self._timers: TimerFacility = timers or AsyncioTimerFacility()

        parser = TimeParser()

        requested_wait = parser.to_milliseconds(wait)
        self._wait = normalize_wait(requested_wait)
        if self._wait != requested_wait:
            self._warn("wait", requested_wait, self._wait)

        if policy is None:
            policy = EdgePolicy.debounce()

        if policy.max_wait is not None:
            policy = replace(
                policy,
                max_wait=parser.to_milliseconds(policy.max_wait),
            )

        self._policy = policy.normalized(self._wait)
        if self._policy.max_wait != policy.max_wait:
            self._warn("max_wait", policy.max_wait, self._policy.max_wait)

        self._last_call_time: float | None = None
        self._last_invoke_time: float = 0.0

        self._pending_args: tuple[Any, ...] | None = None
        self._pending_kwargs: dict[str, Any] | None = None
        self._pending_receiver: Any = None

        self._timer_handle: Any = None
        self._result: R | None = None
        self._invocation_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def wait(self) -> float:
        return self._wait

    @property
    def policy(self) -> EdgePolicy:
        return self._policy

    @property
    def state(self) -> GateState:
        return GateState.IDLE if self._timer_handle is None else GateState.ARMED

    @property
    def pending(self) -> bool:
        return self._timer_handle is not None

    @property
    def result(self) -> R | None:
        return self._result

    @property
    def last_call_time(self) -> float | None:
        return self._last_call_time

    @property
    def last_invoke_time(self) -> float:
        return self._last_invoke_time

    @property
    def invocation_count(self) -> int:
        return self._invocation_count

    def call(
        self,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        receiver: Any = None,
    ) -> R | None:
        """
        Route one call through the gate and return the cached result.

        ``receiver``, when given, is passed as the first positional
        argument of the wrapped callable (the bound instance for methods).
        """
        now = self._timers.now()
        eligible = self._should_invoke(now)
        idle = self._timer_handle is None

        # Arm before touching any state so a facility that cannot schedule
        # leaves the gate exactly as it was.
        if eligible and (idle or self._policy.invokes_while_armed):
            self._arm(self._wait)
            self._capture(args, kwargs, receiver, now)

            if idle:
                return self._leading_edge(now)

            # Calls in a tight loop: the window closed before the armed
            # timer got to run.
            self._trace("tight_loop", now)
            return self._invoke(now)

        if idle:
            self._arm(self._wait)

        self._capture(args, kwargs, receiver, now)

        return self._result

    def cancel(self) -> None:
        """Drop any deferred invocation and forget all timing. Keeps the cached result."""
        if self._timer_handle is not None:
            self._timers.cancel(self._timer_handle)
            self._debug("cancel", self._timers.now())

        self._last_invoke_time = 0.0
        self._last_call_time = None
        self._timer_handle = None
        self._clear_pending()

    def flush(self) -> R | None:
        """Run a deferred trailing edge now, if one is armed, and return the cached result."""
        if self._timer_handle is None:
            return self._result

        now = self._timers.now()
        self._timers.cancel(self._timer_handle)
        self._debug("flush", now)

        return self._trailing_edge(now)

    def _should_invoke(self, now: float) -> bool:
        if self._last_call_time is None:
            return True

        since_last_call = now - self._last_call_time

        # A negative delta means the clock went backwards; treat it as a
        # closed window so the gate never wedges.
        if since_last_call >= self._wait or since_last_call < 0:
            return True

        return (
            self._policy.maxing
            and now - self._last_invoke_time >= self._policy.max_wait
        )

    def _remaining_wait(self, now: float) -> float:
        waiting = self._wait - (now - (self._last_call_time or 0.0))

        if self._policy.maxing:
            return min(
                waiting,
                self._policy.max_wait - (now - self._last_invoke_time),
            )

        return waiting

    def _leading_edge(self, now: float) -> R | None:
        self._mark_window(now)
        self._trace("leading_edge", now)

        if self._policy.leading:
            return self._invoke(now)

        return self._result

    def _trailing_edge(self, now: float) -> R | None:
        self._timer_handle = None
        self._trace("trailing_edge", now)

        if self._policy.trailing and self._pending_args is not None:
            return self._invoke(now)

        self._clear_pending()
        return self._result

    def _timer_expired(self) -> None:
        # The handle that brought us here is spent.
        self._timer_handle = None
        now = self._timers.now()

        if not self._should_invoke(now):
            self._timer_handle = self._timers.schedule_after(
                self._timer_expired,
                self._remaining_wait(now),
            )
            self._trace("rearm", now)
            return

        try:
            self._trailing_edge(now)

        except Exception as err:
            self._error("trailing_edge", now, err)
            raise

    def _invoke(self, now: float) -> R:
        args = self._pending_args or ()
        kwargs = self._pending_kwargs or {}
        receiver = self._pending_receiver

        self._clear_pending()
        self._mark_window(now)
        self._invocation_count += 1

        if receiver is None:
            result = self._func(*args, **kwargs)

        else:
            result = self._func(receiver, *args, **kwargs)

        self._result = result
        return result

    def _mark_window(self, now: float) -> None:
        self._last_invoke_time = now
        if self._policy.anchors_on_invoke:
            self._last_call_time = now

    def _arm(self, delay: float) -> None:
        handle = self._timers.schedule_after(
            self._timer_expired,
            delay,
        )

        if self._timer_handle is not None:
            self._timers.cancel(self._timer_handle)

        self._timer_handle = handle

    def _capture(
        self,
        args: tuple[Any, ...],
        kwargs: dict[str, Any] | None,
        receiver: Any,
        now: float,
    ) -> None:
        self._pending_args = tuple(args)
        self._pending_kwargs = dict(kwargs) if kwargs else {}
        self._pending_receiver = receiver

        if not self._policy.anchors_on_invoke:
            self._last_call_time = now

    def _clear_pending(self) -> None:
        self._pending_args = None
        self._pending_kwargs = None
        self._pending_receiver = None

    def _trace(self, event: str, at: float) -> None:
        if self._logger.enabled(LogLevel.TRACE):
            self._logger.log(
                Log.from_caller(
                    GateTrace(
                        message=f"{self._name} {event} at {at:.3f}ms",
                        gate=self._name,
                        kind=self._policy.kind.value,
                        event=event,
                        at=at,
                    ),
                    depth=1,
                )
            )

    def _debug(self, event: str, at: float) -> None:
        if self._logger.enabled(LogLevel.DEBUG):
            self._logger.log(
                Log.from_caller(
                    GateDebug(
                        message=f"{self._name} {event} at {at:.3f}ms",
                        gate=self._name,
                        kind=self._policy.kind.value,
                        event=event,
                        at=at,
                    ),
                    depth=1,
                )
            )

    def _error(self, event: str, at: float, err: Exception) -> None:
        if self._logger.enabled(LogLevel.ERROR):
            self._logger.log(
                Log.from_caller(
                    GateError(
                        message=f"{self._name} {event} raised {type(err).__name__}: {err}",
                        gate=self._name,
                        kind=self._policy.kind.value,
                        event=event,
                        at=at,
                        error=repr(err),
                    ),
                    depth=1,
                )
            )

    def _warn(self, setting: str, value: Any, normalized: Any) -> None:
        if self._logger.enabled(LogLevel.WARN):
            self._logger.log(
                Log.from_caller(
                    PolicyWarn(
                        message=f"{self._name} {setting}={value} normalized to {normalized}",
                        gate=self._name,
                        setting=setting,
                        value=str(value),
                        normalized=str(normalized),
                    ),
                    depth=1,
                )
            )
