from __future__ import annotations
from enum import Enum
from typing import Literal

LogLevelName = Literal[
    'trace',
    'debug',
    'info',
    'warn',
    'warning',
    'error',
    'critical',
    'fatal'
]


class LogLevel(Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @classmethod
    def to_level(cls, level_name: LogLevelName | str) -> LogLevel:
        """
        Resolve a case-insensitive level name. ``warning`` is accepted
        as an alias of ``warn`` so stdlib-style names in env files work.
        """
        name = level_name.strip().upper()
        if name == "WARNING":
            name = LogLevel.WARN.value

        try:
            return cls(name)

        except ValueError:
            raise ValueError(
                f"Unknown log level {level_name!r}, expected one of "
                f"{', '.join(level.value.lower() for level in cls)}"
            ) from None
