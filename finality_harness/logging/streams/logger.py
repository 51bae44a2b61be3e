from __future__ import annotations

import asyncio
import datetime
import os
import sys
import threading
from typing import TypeVar

import msgspec

from finality_harness.logging.config import LoggingConfig, StreamType
from finality_harness.logging.models import Entry, Log


T = TypeVar('T', bound=Entry)


class Logger:
    def __init__(
        self,
        name: str = 'harness',
        template: str | None = None,
        filename: str = 'harness.json',
    ) -> None:
        self._name = name
        self._default_template = template
        self._filename = filename
        self._config = LoggingConfig()
        self._file_lock = threading.Lock()

    @property
    def name(self):
        return self._name

    async def log(
        self,
        entry: T,
        template: str | None = None,
    ):
        if self._config.enabled(self._name, entry.level) is False:
            return

        if template is None:
            template = self._default_template

        if template is None:
            template = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"

        log_file, line_number, function_name = self._find_caller()

        log = Log(
            entry=entry,
            logger=self._name,
            filename=log_file,
            function_name=function_name,
            line_number=line_number,
        )

        stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr

        try:
            stream.write(
                entry.to_template(
                    template,
                    context={
                        "filename": log.filename,
                        "function_name": log.function_name,
                        "line_number": log.line_number,
                        "thread_id": log.thread_id,
                        "timestamp": log.timestamp,
                    },
                )
                + "\n"
            )
            stream.flush()

            if directory := self._config.directory:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(
                    None,
                    self._write_to_file,
                    log,
                    os.path.join(directory, self._filename),
                )

        except Exception as err:
            error_template = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"

            sys.stderr.write(
                entry.to_template(
                    error_template,
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

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        with self._file_lock:
            os.makedirs(os.path.dirname(logfile_path), exist_ok=True)

            with open(logfile_path, 'ab') as logfile:
                logfile.write(msgspec.json.encode(log) + b"\n")

    def _find_caller(self):
        """
        Find the stack frame of the caller so that we can note the source
        file name, line number and function name.
        """
        frame = sys._getframe(2)
        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )
