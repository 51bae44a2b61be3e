from typing import Any, Protocol


class ConsensusNodeHandle(Protocol):
    """A running consensus node container with dynamically mapped ports."""

    def get_port(self, container_port: str) -> str:
        ...


class ContainerManager(Protocol):
    """Starts the consensus node container and owns every container resource."""

    async def run_consensus_node(
        self,
        directory: str,
        covenant_quorum: int,
        covenant_public_keys: list[bytes],
    ) -> ConsensusNodeHandle:
        ...

    async def bank_send(
        self,
        address: str,
        amount: str,
        from_key: str,
    ) -> Any:
        ...

    async def clear_resources(self) -> None:
        ...
