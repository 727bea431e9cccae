import datetime
import io
import os
import pathlib
import sys
import threading
from typing import (
    Any,
    Callable,
    Dict,
    TextIO,
    TypeVar,
)

import msgspec

from cadence.logging.config import LoggingConfig, StreamType
from cadence.logging.models import Entry, Log, LogLevel

T = TypeVar('T', bound=Entry)


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"


class LoggerStream:
    """
    Synchronous log stream.

    Gates run their edges from inside plain calls and timer callbacks,
    so entries are rendered and written immediately rather than queued
    onto the event loop. Entries go to stdout/stderr (per the active
    ``LoggingConfig``) unless the stream, the call or the config names
    a file, in which case each entry is appended as one msgspec-JSON
    ``Log`` line.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
        models: dict[
            str,
            tuple[
                type[T],
                dict[str, Any],
            ]
        ] | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._config = LoggingConfig()
        self._files: Dict[str, io.TextIOWrapper] = {}
        self._file_lock = threading.Lock()
        self._encoder = msgspec.json.Encoder()
        self._closed = False

        self._models: Dict[str, tuple[type[Entry], dict[str, Any]]] = {}

        if models is None:
            models = {}

        for model_name, config in models.items():
            model, defaults = config

            self._models[model_name] = (
                model,
                defaults
            )

        self._models.update({
            'default': (
                Entry,
                {
                    'level': LogLevel.INFO
                }
            )
        })

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def enabled(self, level: LogLevel) -> bool:
        return self._closed is False and self._config.enabled(self._name, level)

    def log_prepared(
        self,
        message: str,
        name: str = 'default',
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = self._to_entry(message, name)

        self.log(
            Log.from_caller(entry, depth=1),
            template=template,
            path=path,
            filter=filter,
        )

    def log(
        self,
        entry: T | Log,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            is_logfile = len(logfile_path.suffix) > 0

            filename = logfile_path.name if is_logfile else None
            directory = str(logfile_path.parent.absolute()) if is_logfile else str(logfile_path.absolute())

        if template is None:
            template = self._default_template

        if filename is None:
            filename = self._default_logfile

        if directory is None:
            directory = self._default_log_directory

        if directory is None:
            directory = self._config.directory

        if filename or directory:
            self._log_to_file(
                entry,
                filename=filename,
                directory=directory,
                filter=filter,
            )

        else:
            self._log(
                entry,
                template=template,
                filter=filter,
            )

    def _to_entry(
        self,
        message: str,
        name: str,
    ):
        model, defaults = self._models.get(
            name,
            self._models.get('default')
        )

        return model(
            message=message,
            **defaults
        )

    def _unwrap(
        self,
        entry_or_log: T | Log,
        filter: Callable[[T], bool] | None = None,
    ) -> Entry | None:
        entry = entry_or_log.entry if isinstance(entry_or_log, Log) else entry_or_log

        if self.enabled(entry.level) is False:
            return None

        if filter and filter(entry) is False:
            return None

        return entry

    def _log(
        self,
        entry_or_log: T | Log,
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = self._unwrap(entry_or_log, filter=filter)
        if entry is None:
            return

        if template is None:
            template = DEFAULT_TEMPLATE

        if isinstance(entry_or_log, Log):
            log_file = entry_or_log.filename
            line_number = entry_or_log.line_number
            function_name = entry_or_log.function_name

        else:
            log_file, line_number, function_name = self._find_caller()

        stream = self._get_stream(self._config.output)

        try:
            stream.write(
                entry.to_template(
                    template,
                    context={
                        "filename": log_file,
                        "function_name": function_name,
                        "line_number": line_number,
                        "thread_id": threading.get_native_id(),
                        "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
                    },
                )
                + "\n"
            )
            stream.flush()

        except Exception as err:
            self._write_error(
                entry,
                err,
                log_file,
                function_name,
                line_number,
            )

    def _log_to_file(
        self,
        entry_or_log: T | Log,
        filename: str | None = None,
        directory: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = self._unwrap(entry_or_log, filter=filter)
        if entry is None:
            return

        if isinstance(entry_or_log, Log):
            log = entry_or_log

        else:
            log_file, line_number, function_name = self._find_caller()
            log = Log(
                entry=entry,
                filename=log_file,
                function_name=function_name,
                line_number=line_number,
            )

        logfile_path = self._to_logfile_path(
            filename=filename,
            directory=directory,
        )

        try:
            with self._file_lock:
                logfile = self._files.get(logfile_path)
                if logfile is None or logfile.closed:
                    logfile = self._open_file(logfile_path)

                logfile.write(self._encoder.encode(log).decode() + "\n")
                logfile.flush()

        except Exception as err:
            self._write_error(
                entry,
                err,
                log.filename,
                log.function_name,
                log.line_number,
            )

    def _to_logfile_path(
        self,
        filename: str | None = None,
        directory: str | None = None,
    ) -> str:
        if filename is None:
            filename = f"{self._name}.log.json"

        if directory is None:
            directory = os.getcwd()

        return os.path.join(directory, filename)

    def _open_file(self, logfile_path: str) -> io.TextIOWrapper:
        pathlib.Path(logfile_path).parent.mkdir(parents=True, exist_ok=True)

        logfile = open(logfile_path, "a", encoding="utf-8")
        self._files[logfile_path] = logfile

        return logfile

    def _get_stream(self, stream_type: StreamType) -> TextIO:
        # Resolved per write so redirected or captured streams are honored.
        if stream_type == StreamType.STDERR:
            return sys.stderr

        return sys.stdout

    def _write_error(
        self,
        entry: Entry,
        err: Exception,
        log_file: str,
        function_name: str,
        line_number: int,
    ):
        if sys.stderr.closed:
            return

        sys.stderr.write(
            entry.to_template(
                ERROR_TEMPLATE,
                context={
                    "filename": log_file,
                    "function_name": function_name,
                    "line_number": line_number,
                    "error": str(err),
                    "thread_id": threading.get_native_id(),
                    "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
                },
            )
            + "\n"
        )

    def close(self):
        with self._file_lock:
            for logfile in self._files.values():
                if not logfile.closed:
                    logfile.close()

            self._files.clear()

        self._closed = True

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        frame = sys._getframe(3)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )
