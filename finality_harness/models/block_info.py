from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class BlockInfo:
    height: int
    hash: bytes = b""
    finalized: bool = False
