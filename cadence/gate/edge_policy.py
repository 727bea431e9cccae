"""
Edge policies.

An ``EdgePolicy`` is the small immutable value that turns an
``InvocationGate`` into a debouncer or a throttler:

- DEBOUNCE: waits for ``wait`` ms of quiet after the latest call. The
  spacing clock restarts on every call. ``max_wait`` optionally caps how
  long a continuous stream of calls can defer an invocation.
- THROTTLE: invokes at most once per ``wait`` ms. The spacing clock
  restarts on each window's leading edge and on every invocation, not on
  every call, so a continuous stream still yields one invocation per
  window.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, replace
from enum import Enum


class GateKind(Enum):
    DEBOUNCE = "debounce"
    THROTTLE = "throttle"


@dataclass(frozen=True, slots=True)
class EdgePolicy:
    """Which edges invoke, and the debounce deferral ceiling."""

    kind: GateKind = GateKind.DEBOUNCE
    leading: bool = False
    trailing: bool = True
    max_wait: float | str | None = None  # ms or duration string, debounce only

    @classmethod
    def debounce(
        cls,
        leading: bool = False,
        trailing: bool = True,
        max_wait: float | str | None = None,
    ) -> EdgePolicy:
        return cls(
            kind=GateKind.DEBOUNCE,
            leading=bool(leading),
            trailing=bool(trailing),
            max_wait=max_wait,
        )

    @classmethod
    def throttle(
        cls,
        leading: bool = True,
        trailing: bool = True,
    ) -> EdgePolicy:
        return cls(
            kind=GateKind.THROTTLE,
            leading=bool(leading),
            trailing=bool(trailing),
        )

    @property
    def maxing(self) -> bool:
        return self.max_wait is not None

    @property
    def anchors_on_invoke(self) -> bool:
        """True when the spacing clock restarts on invocation rather than on every call."""
        return self.kind == GateKind.THROTTLE

    @property
    def invokes_while_armed(self) -> bool:
        """
        Whether an eligible call that finds a timer already armed invokes
        immediately: debounces do so only under ``max_wait``, throttles
        only when the trailing edge is enabled.
        """
        if self.kind == GateKind.DEBOUNCE:
            return self.maxing

        return self.trailing

    def normalized(self, wait: float) -> EdgePolicy:
        """
        Return a copy whose ``max_wait`` is valid for ``wait``: dropped for
        throttles, NaN treated as unset, and raised to at least ``wait``.
        """
        max_wait = self.max_wait

        if max_wait is None:
            return self

        if self.kind == GateKind.THROTTLE or math.isnan(max_wait):
            return replace(self, max_wait=None)

        if max_wait < wait:
            return replace(self, max_wait=wait)

        return self


def normalize_wait(wait: float) -> float:
    """
    Clamp a wait to the nearest finite, non-negative number of milliseconds.
    NaN counts as zero; an infinite wait becomes the largest finite one.
    """
    if math.isnan(wait) or wait < 0:
        return 0.0

    if math.isinf(wait):
        return sys.float_info.max

    return float(wait)
