from .edge_policy import (
    EdgePolicy as EdgePolicy,
    GateKind as GateKind,
    normalize_wait as normalize_wait,
)
from .gate_state import GateState as GateState
from .gated_callable import (
    BoundGatedCallable as BoundGatedCallable,
    GatedCallable as GatedCallable,
    debounce as debounce,
    throttle as throttle,
)
from .invocation_gate import InvocationGate as InvocationGate
