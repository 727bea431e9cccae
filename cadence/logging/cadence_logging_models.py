from .models import Entry, LogLevel


class GateTrace(Entry, kw_only=True):
    gate: str
    kind: str
    event: str
    at: float
    level: LogLevel = LogLevel.TRACE

class GateDebug(Entry, kw_only=True):
    gate: str
    kind: str
    event: str
    at: float
    level: LogLevel = LogLevel.DEBUG

class GateError(Entry, kw_only=True):
    gate: str
    kind: str
    event: str
    at: float
    error: str
    level: LogLevel = LogLevel.ERROR

class PolicyWarn(Entry, kw_only=True):
    gate: str
    setting: str
    value: str
    normalized: str
    level: LogLevel = LogLevel.WARN
