from finality_harness.logging.models import Entry, LogLevel


class ScenarioInfo(Entry, kw_only=True):
    scenario: str
    action: str = ""
    level: LogLevel = LogLevel.INFO


class ScenarioError(Entry, kw_only=True):
    scenario: str
    action: str = ""
    level: LogLevel = LogLevel.ERROR
