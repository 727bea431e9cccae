from __future__ import annotations

import datetime
import sys
import threading

import msgspec

from .entry import Entry


class Log(msgspec.Struct, kw_only=True):
    entry: Entry
    filename: str
    function_name: str
    line_number: int
    thread_id: int = msgspec.field(
        default_factory=threading.get_native_id,
    )
    timestamp: str = msgspec.field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC).isoformat()
    )

    @classmethod
    def from_caller(cls, entry: Entry, depth: int = 1) -> Log:
        """Wrap ``entry`` with the source location ``depth`` frames up."""
        frame = sys._getframe(depth + 1)
        code = frame.f_code

        return cls(
            entry=entry,
            filename=code.co_filename,
            function_name=code.co_name,
            line_number=frame.f_lineno,
        )
