"""
Tests for InvocationGate state tracking.

These tests verify that:
1. The gate moves between IDLE and ARMED as calls, timers, cancel and flush happen
2. Timer re-arming honors both wait and max_wait
3. At most one live timer exists per gate
4. Configuration is normalized rather than rejected
5. Explicit receivers are threaded through to the wrapped callable
"""

import math
import sys

import pytest

from cadence import (
    AsyncioTimerFacility,
    EdgePolicy,
    GateState,
    InvocationGate,
    VirtualTimerFacility,
)


class TestInvocationGateState:
    """IDLE/ARMED transitions."""

    def test_initial_state(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 100, timers=virtual_timers)

        assert gate.state == GateState.IDLE
        assert gate.pending is False
        assert gate.last_call_time is None
        assert gate.last_invoke_time == 0.0
        assert gate.result is None
        assert gate.invocation_count == 0

    def test_call_arms_and_timer_disarms(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 100, timers=virtual_timers)

        gate.call(("a",))
        assert gate.state == GateState.ARMED
        assert gate.last_call_time == 0

        virtual_timers.advance(100)
        assert gate.state == GateState.IDLE
        assert gate.result == 1
        assert gate.last_invoke_time == 100

    def test_timer_before_quiet_period_rearms(self, virtual_timers, recorder) -> None:
        """A timer firing inside the quiet period re-arms for the remaining wait."""
        gate = InvocationGate(recorder, 100, timers=virtual_timers)

        gate.call(("a",))
        virtual_timers.advance(40)
        gate.call(("b",))

        virtual_timers.advance(60)
        assert gate.state == GateState.ARMED
        assert virtual_timers.next_due == 140
        assert recorder.count == 0

    def test_rearm_is_clamped_by_max_wait(self, virtual_timers, recorder) -> None:
        """The remaining wait never overshoots the max_wait deadline."""
        gate = InvocationGate(
            recorder,
            100,
            policy=EdgePolicy.debounce(max_wait=120),
            timers=virtual_timers,
        )

        gate.call(("a",))
        virtual_timers.advance(90)
        gate.call(("b",))

        virtual_timers.advance(10)
        assert gate.state == GateState.ARMED
        assert virtual_timers.next_due == 120

        virtual_timers.advance(20)
        assert recorder.args == [("b",)]
        assert recorder.times == [120]

    def test_cancel_returns_to_idle(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 100, timers=virtual_timers)

        gate.call(("a",))
        gate.cancel()

        assert gate.state == GateState.IDLE
        assert gate.last_call_time is None

    def test_flush_returns_to_idle(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 100, timers=virtual_timers)

        gate.call(("a",))
        assert gate.flush() == 1
        assert gate.state == GateState.IDLE

    def test_at_most_one_live_timer(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(
            recorder,
            100,
            policy=EdgePolicy.debounce(leading=True, max_wait=150),
            timers=virtual_timers,
        )

        for index in range(200):
            gate.call((index,))
            assert virtual_timers.pending <= 1
            virtual_timers.advance(7)

        virtual_timers.run_all()
        assert virtual_timers.pending == 0
        assert gate.state == GateState.IDLE


class TestInvocationGateConfiguration:
    """Construction-time normalization."""

    def test_defaults_to_trailing_debounce(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, timers=virtual_timers)

        assert gate.wait == 0
        assert gate.policy == EdgePolicy.debounce()

    def test_default_timer_facility_is_asyncio(self, recorder) -> None:
        gate = InvocationGate(recorder, 10)

        assert isinstance(gate._timers, AsyncioTimerFacility)

    def test_nan_wait_is_normalized(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, math.nan, timers=virtual_timers)

        assert gate.wait == 0

    def test_infinite_wait_never_fires_on_its_own(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, math.inf, timers=virtual_timers)

        assert gate.wait == sys.float_info.max

        gate.call(("a",))
        virtual_timers.advance(10**9)
        assert recorder.count == 0

        assert gate.flush() == 1
        assert recorder.args == [("a",)]

    def test_negative_duration_string_is_clamped(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, "-100ms", timers=virtual_timers)

        assert gate.wait == 0

    def test_exponent_duration_string(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(
            recorder,
            "1e3",
            policy=EdgePolicy.debounce(max_wait="2.5e3ms"),
            timers=virtual_timers,
        )

        assert gate.wait == 1000
        assert gate.policy.max_wait == 2500

    def test_nan_max_wait_is_dropped(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(
            recorder,
            100,
            policy=EdgePolicy.debounce(max_wait=math.nan),
            timers=virtual_timers,
        )

        assert gate.policy.max_wait is None

    def test_unparseable_wait_raises(self, virtual_timers, recorder) -> None:
        with pytest.raises(ValueError, match="Invalid duration"):
            InvocationGate(recorder, "soon", timers=virtual_timers)

    def test_non_callable_raises(self, virtual_timers) -> None:
        with pytest.raises(TypeError, match="Expected a callable"):
            InvocationGate(42, 100, timers=virtual_timers)

    def test_name_defaults_to_qualname(self, virtual_timers) -> None:
        def on_resize():
            pass

        gate = InvocationGate(on_resize, 100, timers=virtual_timers)

        assert gate.name.endswith("on_resize")


class TestInvocationGateReceiver:
    """Explicit receiver threading."""

    def test_receiver_is_first_argument(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 0, timers=virtual_timers)
        receiver = object()

        gate.call(("x",), {"key": 1}, receiver=receiver)
        virtual_timers.advance(0)

        assert recorder.calls[0].args == (receiver, "x")
        assert recorder.calls[0].kwargs == {"key": 1}

    def test_last_receiver_wins(self, virtual_timers, recorder) -> None:
        gate = InvocationGate(recorder, 100, timers=virtual_timers)
        first, second = object(), object()

        gate.call(("a",), receiver=first)
        gate.call(("b",), receiver=second)
        virtual_timers.advance(100)

        assert recorder.args == [(second, "b")]


class UnavailableTimers(VirtualTimerFacility):
    """Virtual clock whose scheduling can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.available = True

    def schedule_after(self, callback, delay_ms):
        if not self.available:
            raise RuntimeError("timer facility unavailable")

        return super().schedule_after(callback, delay_ms)


class TestInvocationGateArmFailure:
    """A facility that fails to schedule leaves the gate unchanged."""

    def test_failed_leading_arm(self) -> None:
        timers = UnavailableTimers()
        seen = []
        gate = InvocationGate(
            seen.append,
            100,
            policy=EdgePolicy.debounce(leading=True),
            timers=timers,
        )

        timers.available = False
        with pytest.raises(RuntimeError):
            gate.call(("a",))

        assert gate.state == GateState.IDLE
        assert gate.last_call_time is None
        assert gate.last_invoke_time == 0.0
        assert gate._pending_args is None
        assert seen == []

        timers.available = True
        gate.call(("b",))
        assert seen == ["b"]

    def test_failed_tight_loop_rearm_keeps_the_live_timer(self) -> None:
        timers = UnavailableTimers()
        seen = []
        gate = InvocationGate(
            seen.append,
            100,
            policy=EdgePolicy.debounce(max_wait=150),
            timers=timers,
        )

        gate.call(("a",))
        timers.set_time(160)

        timers.available = False
        with pytest.raises(RuntimeError):
            gate.call(("b",))

        assert gate.state == GateState.ARMED
        assert gate.last_call_time == 0
        assert timers.pending == 1
        assert timers.next_due == 100

        timers.available = True
        timers.advance(0)

        assert seen == ["a"]
        assert gate.state == GateState.IDLE
