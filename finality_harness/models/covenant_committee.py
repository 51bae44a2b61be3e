from dataclasses import dataclass, field

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec


@dataclass(slots=True)
class CovenantCommittee:
    """
    Auxiliary signers that authorize the consensus node's genesis.

    Public keys are 33-byte compressed secp256k1 points.
    """

    quorum: int
    private_keys: list[ec.EllipticCurvePrivateKey] = field(default_factory=list)
    public_keys: list[bytes] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.public_keys)

    @property
    def public_keys_hex(self) -> list[str]:
        return [public_key.hex() for public_key in self.public_keys]

    def private_key_bytes(self, index: int) -> bytes:
        private_value = self.private_keys[index].private_numbers().private_value
        return private_value.to_bytes(32, "big")

    @classmethod
    def generate(cls, size: int, quorum: int) -> "CovenantCommittee":
        if size < 1:
            raise ValueError("Covenant committee requires at least one member")

        if not 1 <= quorum <= size:
            raise ValueError(
                f"Covenant quorum must be between 1 and {size}, got {quorum}"
            )

        committee = cls(quorum=quorum)
        for _ in range(size):
            private_key = ec.generate_private_key(ec.SECP256K1())
            committee.private_keys.append(private_key)
            committee.public_keys.append(
                private_key.public_key().public_bytes(
                    serialization.Encoding.X962,
                    serialization.PublicFormat.CompressedPoint,
                )
            )

        return committee
