import os
from typing import Awaitable, Callable

from finality_harness.logging import Logger
from finality_harness.models import CovenantCommittee

from .container_manager import ConsensusNodeHandle, ContainerManager
from .managed_service import ManagedService
from .probes import tcp_probe

RPC_CONTAINER_PORT = "26657/tcp"
GRPC_CONTAINER_PORT = "9090/tcp"


class ConsensusNodeService(ManagedService):
    """
    The consensus node, run in a container by the ContainerManager.

    Until a richer probe is bound with bind_probe(), readiness means the
    mapped RPC port accepts connections.
    """

    def __init__(
        self,
        container_manager: ContainerManager,
        directory: str,
        committee: CovenantCommittee,
        logger: Logger | None = None,
    ) -> None:
        super().__init__("consensus-node", logger=logger)
        self.container_manager = container_manager
        self.directory = directory
        self.committee = committee

        self._handle: ConsensusNodeHandle | None = None
        self._bound_probe: Callable[[], Awaitable[bool]] | None = None

    @property
    def handle(self) -> ConsensusNodeHandle:
        if self._handle is None:
            raise RuntimeError("Consensus node has not been launched")

        return self._handle

    @property
    def rpc_port(self) -> int:
        return int(self.handle.get_port(RPC_CONTAINER_PORT))

    @property
    def grpc_port(self) -> int:
        return int(self.handle.get_port(GRPC_CONTAINER_PORT))

    @property
    def rpc_address(self) -> str:
        return f"http://localhost:{self.rpc_port}"

    @property
    def grpc_address(self) -> str:
        return f"https://localhost:{self.grpc_port}"

    @property
    def key_directory(self) -> str:
        return os.path.join(self.directory, "node0", "babylond")

    def bind_probe(self, probe: Callable[[], Awaitable[bool]]) -> None:
        self._bound_probe = probe

    async def _launch(self) -> None:
        self._handle = await self.container_manager.run_consensus_node(
            self.directory,
            self.committee.quorum,
            self.committee.public_keys,
        )

    async def _probe(self) -> bool:
        if self._bound_probe is not None:
            return await self._bound_probe()

        return await tcp_probe("localhost", self.rpc_port)

    async def _shutdown(self) -> None:
        await self.container_manager.clear_resources()
