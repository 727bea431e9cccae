from __future__ import annotations
import os
from pydantic import BaseModel, StrictStr
from typing import Callable, Dict, Literal, Union

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    CADENCE_LOG_LEVEL: StrictStr = "info"
    CADENCE_LOG_OUTPUT: Literal["stdout", "stderr"] = "stdout"
    CADENCE_LOGS_DIRECTORY: StrictStr | None = None
    CADENCE_DISABLED_LOGGERS: StrictStr = ""

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "CADENCE_LOG_LEVEL": str,
            "CADENCE_LOG_OUTPUT": str,
            "CADENCE_LOGS_DIRECTORY": os.path.expanduser,
            "CADENCE_DISABLED_LOGGERS": str,
        }

    def get_logging_config(self) -> dict:
        """Keyword arguments for ``LoggingConfig.update``."""
        return {
            'log_level': self.CADENCE_LOG_LEVEL,
            'log_output': self.CADENCE_LOG_OUTPUT,
            'log_directory': self.CADENCE_LOGS_DIRECTORY,
            'disabled_loggers': [
                name.strip()
                for name in self.CADENCE_DISABLED_LOGGERS.split(',')
                if name.strip()
            ],
        }
