from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class KeyRecord:
    """Key material returned by the signing service for one public key."""

    name: str
    private_key: bytes


@dataclass(slots=True, frozen=True)
class ChainKeyInfo:
    """A freshly created chain account key."""

    name: str
    address: str
    mnemonic: str = ""
