from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Description:
    """Descriptive metadata attached to an actor when it registers on chain."""

    moniker: str
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""
