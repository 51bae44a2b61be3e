from dataclasses import dataclass, field

from finality_harness.clients import (
    ConsensusController,
    ConsumerController,
    SigningClient,
)
from finality_harness.lifecycle import ConsensusNodeService, ManagedService
from finality_harness.models import (
    CovenantCommittee,
    InstanceConfig,
    SigningServiceConfig,
)
from finality_harness.registry import InstanceRegistry
from finality_harness.resources import ResourceAllocator


@dataclass(slots=True)
class HarnessEnvironment:
    """
    Everything one test run owns. Tearing it down cascades to every service
    and instance in it.

    Fields after consensus_node are filled in as bootstrap progresses, so a
    partially bootstrapped environment can still be torn down.
    """

    allocator: ResourceAllocator
    committee: CovenantCommittee
    chain_id: str
    consensus_node: ConsensusNodeService
    registry: InstanceRegistry
    base_config: InstanceConfig | None = None
    controller: ConsensusController | None = None
    consumer: ConsumerController | None = None
    signing_config: SigningServiceConfig | None = None
    signing_service: ManagedService | None = None
    signing_client: SigningClient | None = None
    torn_down: bool = field(default=False)

    @property
    def base_directory(self) -> str:
        return self.allocator.base_directory

    @property
    def covenant_quorum(self) -> int:
        return self.committee.quorum

    @property
    def signing_service_address(self) -> str:
        if self.signing_config is None:
            raise RuntimeError("Signing service has not been configured")

        return self.signing_config.rpc_listener

    def require_controllers(self) -> tuple[ConsensusController, ConsumerController]:
        if self.controller is None or self.consumer is None:
            raise RuntimeError("Consensus controllers have not been created")

        return self.controller, self.consumer

    def require_signing_client(self) -> SigningClient:
        if self.signing_client is None:
            raise RuntimeError("Signing client has not been created")

        return self.signing_client
