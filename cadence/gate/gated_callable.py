import functools
from typing import Any, Callable, Generic, TypeVar, overload

from cadence.logging import LoggerStream
from cadence.timers import TimerFacility

from .edge_policy import EdgePolicy
from .invocation_gate import InvocationGate


R = TypeVar("R")


class GatedCallable(Generic[R]):
    """
    Callable front for an ``InvocationGate``.

    Calling it routes through the gate and returns the cached result.
    Used as a method it binds the instance as the gate's receiver; every
    instance shares the one gate, so the last caller's instance wins.
    """

    def __init__(
        self,
        gate: InvocationGate[R],
        func: Callable[..., R],
    ) -> None:
        self._gate = gate
        functools.update_wrapper(self, func)

    @property
    def gate(self) -> InvocationGate[R]:
        return self._gate

    @property
    def pending(self) -> bool:
        return self._gate.pending

    def __call__(self, *args: Any, **kwargs: Any) -> R | None:
        return self._gate.call(args, kwargs)

    def cancel(self) -> None:
        self._gate.cancel()

    def flush(self) -> R | None:
        return self._gate.flush()

    def __get__(self, instance: Any, owner: type | None = None):
        if instance is None:
            return self

        return BoundGatedCallable(self._gate, instance)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self._gate.name} "
            f"{self._gate.policy.kind.value} wait={self._gate.wait}ms "
            f"state={self._gate.state.value}>"
        )


class BoundGatedCallable(Generic[R]):

    def __init__(
        self,
        gate: InvocationGate[R],
        receiver: Any,
    ) -> None:
        self._gate = gate
        self._receiver = receiver

    @property
    def gate(self) -> InvocationGate[R]:
        return self._gate

    @property
    def pending(self) -> bool:
        return self._gate.pending

    def __call__(self, *args: Any, **kwargs: Any) -> R | None:
        return self._gate.call(args, kwargs, receiver=self._receiver)

    def cancel(self) -> None:
        self._gate.cancel()

    def flush(self) -> R | None:
        return self._gate.flush()


@overload
def debounce(
    func: Callable[..., R],
    wait: float | int | str = 0,
    *,
    leading: bool = False,
    trailing: bool = True,
    max_wait: float | int | str | None = None,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
) -> GatedCallable[R]: ...
@overload
def debounce(
    func: None = None,
    wait: float | int | str = 0,
    *,
    leading: bool = False,
    trailing: bool = True,
    max_wait: float | int | str | None = None,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
) -> Callable[[Callable[..., R]], GatedCallable[R]]: ...
def debounce(
    func: Callable[..., R] | None = None,
    wait: float | int | str = 0,
    *,
    leading: bool = False,
    trailing: bool = True,
    max_wait: float | int | str | None = None,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
):
    """
    Delay calls to ``func`` until ``wait`` ms have passed without a call.

    Works as ``debounce(func, 300)``, ``@debounce`` or
    ``@debounce(wait="300ms", leading=True)``. ``max_wait`` bounds how
    long a continuous stream of calls may defer an invocation.
    """

    def decorator(target: Callable[..., R]) -> GatedCallable[R]:
        gate = InvocationGate(
            target,
            wait=wait,
            policy=EdgePolicy.debounce(
                leading=leading,
                trailing=trailing,
                max_wait=max_wait,
            ),
            timers=timers,
            name=name,
            logger=logger,
        )

        return GatedCallable(gate, target)

    if func is None:
        return decorator

    return decorator(func)


@overload
def throttle(
    func: Callable[..., R],
    wait: float | int | str = 0,
    *,
    leading: bool = True,
    trailing: bool = True,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
) -> GatedCallable[R]: ...
@overload
def throttle(
    func: None = None,
    wait: float | int | str = 0,
    *,
    leading: bool = True,
    trailing: bool = True,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
) -> Callable[[Callable[..., R]], GatedCallable[R]]: ...
def throttle(
    func: Callable[..., R] | None = None,
    wait: float | int | str = 0,
    *,
    leading: bool = True,
    trailing: bool = True,
    timers: TimerFacility | None = None,
    name: str | None = None,
    logger: LoggerStream | None = None,
):
    """Invoke ``func`` at most once per ``wait`` ms, on the leading and/or trailing edge."""

    def decorator(target: Callable[..., R]) -> GatedCallable[R]:
        gate = InvocationGate(
            target,
            wait=wait,
            policy=EdgePolicy.throttle(
                leading=leading,
                trailing=trailing,
            ),
            timers=timers,
            name=name,
            logger=logger,
        )

        return GatedCallable(gate, target)

    if func is None:
        return decorator

    return decorator(func)
