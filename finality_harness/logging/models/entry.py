from typing import Any

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """
    Base for every structured log record. Subclasses add their domain
    fields and pin `level`.
    """

    message: str | None = None
    tags: set[str] = msgspec.field(
        default_factory=set,
    )
    level: LogLevel

    def to_template(
        self,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> str:
        values: dict[str, Any] = {
            name: getattr(self, name) for name in self.__struct_fields__
        }
        values["level"] = self.level.value

        if context:
            values.update(context)

        return template.format(**values)
