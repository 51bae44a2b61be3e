from __future__ import annotations

from enum import Enum
from typing import Literal

LogLevelName = Literal[
    'trace',
    'debug',
    'info',
    'warn',
    'error',
    'critical',
    'fatal',
]


class LogLevel(Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def to_level(cls, level_name: LogLevelName) -> LogLevel:
        """Unknown names fall back to INFO."""
        try:
            return cls(level_name.upper())

        except ValueError:
            return cls.INFO


_SEVERITY: dict[LogLevel, int] = {
    level: severity for severity, level in enumerate(LogLevel)
}
