"""
Pytest configuration for the cadence test suite.

Provides a virtual clock, a call recorder bound to it, and resets the
process-wide logging config between tests.
"""

from dataclasses import dataclass, field
from typing import Any

import pytest

from cadence.logging import LoggingConfig
from cadence.timers import VirtualTimerFacility


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@dataclass
class RecordedCall:
    at: float
    args: tuple[Any, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)


class CallRecorder:
    """Wrapped-function stand-in that records when and how it was invoked."""

    def __init__(self, timers: VirtualTimerFacility) -> None:
        self._timers = timers
        self.calls: list[RecordedCall] = []

    def __call__(self, *args: Any, **kwargs: Any) -> int:
        self.calls.append(
            RecordedCall(
                at=self._timers.now(),
                args=args,
                kwargs=kwargs,
            )
        )
        return len(self.calls)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def times(self) -> list[float]:
        return [call.at for call in self.calls]

    @property
    def args(self) -> list[tuple[Any, ...]]:
        return [call.args for call in self.calls]


@pytest.fixture
def virtual_timers() -> VirtualTimerFacility:
    return VirtualTimerFacility()


@pytest.fixture
def recorder(virtual_timers: VirtualTimerFacility) -> CallRecorder:
    return CallRecorder(virtual_timers)


@pytest.fixture(autouse=True)
def reset_logging_config():
    yield
    LoggingConfig().reset()
