"""
Structured logging models for environment orchestration.

Follows the Entry-based pattern from finality_harness/logging/models.
"""

from finality_harness.logging.models import Entry, LogLevel


class ManagerDebug(Entry, kw_only=True):
    base_directory: str = ""
    chain_id: str = ""
    level: LogLevel = LogLevel.DEBUG


class ManagerInfo(Entry, kw_only=True):
    base_directory: str = ""
    chain_id: str = ""
    level: LogLevel = LogLevel.INFO


class ManagerWarning(Entry, kw_only=True):
    base_directory: str = ""
    chain_id: str = ""
    level: LogLevel = LogLevel.WARN


class ManagerError(Entry, kw_only=True):
    base_directory: str = ""
    chain_id: str = ""
    level: LogLevel = LogLevel.ERROR
