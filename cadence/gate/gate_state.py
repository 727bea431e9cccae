from enum import Enum


class GateState(Enum):
    """
    Gate lifecycle.

    - IDLE: no timer armed, nothing deferred (initial and terminal)
    - ARMED: exactly one timer armed for the trailing edge
    """

    IDLE = "idle"
    ARMED = "armed"
