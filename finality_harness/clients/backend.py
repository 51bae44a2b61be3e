from abc import ABC, abstractmethod
from typing import Any

from finality_harness.env import HarnessEnv
from finality_harness.lifecycle import ManagedService, SigningService
from finality_harness.models import ChainKeyInfo, InstanceConfig, SigningServiceConfig

from .protocols import (
    ApplicationApp,
    ApplicationServer,
    ConsensusController,
    ConsumerController,
    SigningClient,
)


class HarnessBackend(ABC):
    """
    Constructors for every external client and service the harness needs.

    Implementations bind the harness to a concrete consensus node, signing
    service and application. Each method may raise; the manager decides
    whether a failure is retried or fatal.
    """

    def __init__(self, env: HarnessEnv | None = None) -> None:
        self.env = env or HarnessEnv()

    @abstractmethod
    async def create_consensus_controller(
        self,
        config: InstanceConfig,
    ) -> ConsensusController:
        ...

    @abstractmethod
    async def create_consumer_controller(
        self,
        config: InstanceConfig,
    ) -> ConsumerController:
        ...

    @abstractmethod
    async def create_signing_client(self, address: str) -> SigningClient:
        ...

    @abstractmethod
    async def create_chain_key(
        self,
        config: InstanceConfig,
        passphrase: str,
        hd_path: str,
    ) -> ChainKeyInfo:
        ...

    @abstractmethod
    async def open_database(self, config: InstanceConfig) -> Any:
        ...

    @abstractmethod
    async def create_application(
        self,
        config: InstanceConfig,
        controller: ConsensusController,
        consumer: ConsumerController,
        signing_client: SigningClient,
        database: Any,
    ) -> ApplicationApp:
        ...

    @abstractmethod
    async def create_application_server(
        self,
        config: InstanceConfig,
        application: ApplicationApp,
        database: Any,
    ) -> ApplicationServer:
        ...

    def create_signing_service(self, config: SigningServiceConfig) -> ManagedService:
        return SigningService(
            config,
            binary=self.env.HARNESS_SIGNING_SERVICE_BINARY,
            stop_grace_period=self.env.seconds('HARNESS_SERVICE_STOP_GRACE_PERIOD'),
        )
