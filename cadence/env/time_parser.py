import re


class TimeParser:
    """
    Parses duration strings like ``250ms``, ``1.5s``, ``1m30s`` or ``1e3``
    into milliseconds. Signs are kept so callers can clamp negatives.
    """

    def __init__(self) -> None:
        self._units = {
            "": 1.0,
            "ms": 1.0,
            "s": 1000.0,
            "m": 60_000.0,
            "h": 3_600_000.0,
            "d": 86_400_000.0,
            "w": 604_800_000.0,
        }

        number = r"[-+]?\d+(?:\.\d+)?(?:e[-+]?\d+)?"
        unit = r"ms|[smhdw]"

        self._pattern = re.compile(
            rf"(?P<val>{number})\s*(?P<unit>{unit})?",
            flags=re.I,
        )
        self._duration = re.compile(
            rf"\s*(?:(?:{number})\s*(?:{unit})?\s*)+",
            flags=re.I,
        )

    def parse(self, time_amount: str) -> float:
        if not self._duration.fullmatch(time_amount):
            raise ValueError(f"Invalid duration {time_amount!r}")

        return sum(
            float(m.group("val")) * self._units[(m.group("unit") or "").lower()]
            for m in self._pattern.finditer(time_amount)
        )

    def to_milliseconds(self, value: float | int | str) -> float:
        """Coerce a duration to milliseconds. Numbers are taken as milliseconds."""
        if isinstance(value, str):
            return self.parse(value)

        return float(value)
