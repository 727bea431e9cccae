from .gate import (
    EdgePolicy as EdgePolicy,
    GateKind as GateKind,
    GateState as GateState,
    GatedCallable as GatedCallable,
    InvocationGate as InvocationGate,
    debounce as debounce,
    throttle as throttle,
)
from .timers import (
    AsyncioTimerFacility as AsyncioTimerFacility,
    TimerFacility as TimerFacility,
    VirtualTimerFacility as VirtualTimerFacility,
)
