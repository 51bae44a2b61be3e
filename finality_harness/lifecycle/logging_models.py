"""
Structured logging models for managed service lifecycle events.

Follows the Entry-based pattern from finality_harness/logging/models.
"""

from finality_harness.logging.models import Entry, LogLevel


class ServiceDebug(Entry, kw_only=True):
    service_name: str
    state: str = ""
    level: LogLevel = LogLevel.DEBUG


class ServiceInfo(Entry, kw_only=True):
    service_name: str
    state: str = ""
    level: LogLevel = LogLevel.INFO


class ServiceWarning(Entry, kw_only=True):
    service_name: str
    state: str = ""
    level: LogLevel = LogLevel.WARN


class ServiceError(Entry, kw_only=True):
    service_name: str
    state: str = ""
    level: LogLevel = LogLevel.ERROR
