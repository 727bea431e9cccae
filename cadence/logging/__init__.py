from .cadence_logging_models import (
    GateDebug as GateDebug,
    GateError as GateError,
    GateTrace as GateTrace,
    PolicyWarn as PolicyWarn,
)
from .config import (
    LoggingConfig as LoggingConfig,
    StreamType as StreamType,
)
from .models import (
    Entry as Entry,
    Log as Log,
    LogLevel as LogLevel,
)
from .streams import LoggerStream as LoggerStream
