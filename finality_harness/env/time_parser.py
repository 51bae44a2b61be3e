import re
from datetime import timedelta


class TimeParser:
    """
    Parses duration strings such as "5m", "0.5s" or "1m30s" into seconds.
    A bare number is read as seconds.
    """

    _duration = re.compile(r"(\d+(\.\d+)?[smhdw]?)+", flags=re.I)
    _component = re.compile(r"(?P<val>\d+(\.\d+)?)(?P<unit>[smhdw]?)", flags=re.I)

    def __init__(self) -> None:
        self._units = {
            "s": "seconds",
            "m": "minutes",
            "h": "hours",
            "d": "days",
            "w": "weeks",
        }

    def parse(self, time_amount: str) -> float:
        compact = time_amount.replace(" ", "")
        if not self._duration.fullmatch(compact):
            raise ValueError(f"Invalid duration '{time_amount}'")

        amounts: dict[str, float] = {}
        for match in self._component.finditer(compact):
            unit = self._units.get(match.group("unit").lower(), "seconds")
            amounts[unit] = amounts.get(unit, 0.0) + float(match.group("val"))

        return timedelta(**amounts).total_seconds()
