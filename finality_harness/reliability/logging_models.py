"""
Structured logging models for retry and convergence polling.

Follows the Entry-based pattern from finality_harness/logging/models.
"""

from finality_harness.logging.models import Entry, LogLevel


class ConvergenceTrace(Entry, kw_only=True):
    description: str
    attempt: int = 0
    elapsed: float = 0.0
    level: LogLevel = LogLevel.TRACE


class ConvergenceDebug(Entry, kw_only=True):
    description: str
    attempt: int = 0
    elapsed: float = 0.0
    level: LogLevel = LogLevel.DEBUG


class ConvergenceInfo(Entry, kw_only=True):
    description: str
    attempt: int = 0
    elapsed: float = 0.0
    level: LogLevel = LogLevel.INFO


class ConvergenceError(Entry, kw_only=True):
    description: str
    attempt: int = 0
    elapsed: float = 0.0
    level: LogLevel = LogLevel.ERROR
