from .asyncio_timer_facility import AsyncioTimerFacility as AsyncioTimerFacility
from .timer_facility import (
    TimerCallback as TimerCallback,
    TimerFacility as TimerFacility,
)
from .virtual_timer_facility import (
    VirtualTimer as VirtualTimer,
    VirtualTimerFacility as VirtualTimerFacility,
)
