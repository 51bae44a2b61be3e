"""
Structured logging models for application instances.

Follows the Entry-based pattern from finality_harness/logging/models.
"""

from finality_harness.logging.models import Entry, LogLevel


class InstanceDebug(Entry, kw_only=True):
    instance_id: str
    account_address: str = ""
    level: LogLevel = LogLevel.DEBUG


class InstanceInfo(Entry, kw_only=True):
    instance_id: str
    account_address: str = ""
    level: LogLevel = LogLevel.INFO


class InstanceWarning(Entry, kw_only=True):
    instance_id: str
    account_address: str = ""
    level: LogLevel = LogLevel.WARN


class InstanceError(Entry, kw_only=True):
    instance_id: str
    account_address: str = ""
    level: LogLevel = LogLevel.ERROR
