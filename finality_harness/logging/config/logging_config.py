import contextvars
from enum import Enum
from typing import List, Literal

from finality_harness.logging.models import LogLevel, LogLevelName


LogOutput = Literal['stdout', 'stderr']


class StreamType(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


_global_log_level = contextvars.ContextVar("_global_log_level", default=LogLevel.ERROR)
_global_disabled_loggers = contextvars.ContextVar("_global_disabled_loggers", default=[])
_global_log_output_type = contextvars.ContextVar("_global_log_output_type", default=StreamType.STDERR)
_global_logging_directory = contextvars.ContextVar("_global_logging_directory", default=None)


class LoggingConfig:
    """
    Process-wide logging settings held in context variables, so a test task
    can raise the level or redirect output without affecting its siblings.
    """

    def __init__(self) -> None:
        self._log_level: contextvars.ContextVar[LogLevel] = _global_log_level
        self._log_output_type: contextvars.ContextVar[StreamType] = _global_log_output_type
        self._log_directory: contextvars.ContextVar[str | None] = _global_logging_directory
        self._disabled_loggers: contextvars.ContextVar[List[str]] = (
            _global_disabled_loggers
        )

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        if log_directory:
            self._log_directory.set(log_directory)

        if log_level:
            self._log_level.set(
                LogLevel.to_level(log_level)
            )

        if log_output:
            self._log_output_type.set(StreamType(log_output))

    def disable(self, logger_name: str):
        disabled_loggers = list(self._disabled_loggers.get())
        if logger_name not in disabled_loggers:
            disabled_loggers.append(logger_name)
            self._disabled_loggers.set(disabled_loggers)

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        if logger_name in self._disabled_loggers.get():
            return False

        return log_level.severity >= self._log_level.get().severity

    @property
    def level(self) -> LogLevel:
        return self._log_level.get()

    @property
    def output(self) -> StreamType:
        return self._log_output_type.get()

    @property
    def directory(self) -> str | None:
        return self._log_directory.get()
