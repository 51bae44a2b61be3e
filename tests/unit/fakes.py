"""
In-memory stand-ins for the consensus node, signing service and application.

FakeChain advances one block every time it is queried. Running actors vote
on each new block, and a block is finalized once every registered actor
has voted on it.
"""

import asyncio
import hashlib
from typing import Any

from finality_harness.clients import HarnessBackend
from finality_harness.env import HarnessEnv
from finality_harness.lifecycle import ManagedService
from finality_harness.models import (
    BlockInfo,
    ChainKeyInfo,
    Description,
    InstanceConfig,
    KeyRecord,
    SigningServiceConfig,
)


class FakeChain:
    def __init__(self) -> None:
        self.height = 0
        self.actors: list[bytes] = []
        self.votes: dict[int, set[bytes]] = {}
        self.finalized: set[int] = set()
        self.voters: dict[bytes, "FakeInstanceHandle"] = {}

    def tick(self) -> int:
        self.height += 1
        for public_key, voter in self.voters.items():
            if voter.running:
                voter.last_voted_height = self.height
                self.votes.setdefault(self.height, set()).add(public_key)

        voted = self.votes.get(self.height, set())
        if self.actors and len(voted) >= len(self.actors):
            self.finalized.add(self.height)

        return self.height


class FakeNodeHandle:
    def __init__(self, ports: dict[str, str] | None = None) -> None:
        self.ports = ports or {
            "26657/tcp": "26657",
            "9090/tcp": "9090",
        }

    def get_port(self, container_port: str) -> str:
        return self.ports[container_port]


class FakeContainerManager:
    def __init__(self, fail_clear: bool = False) -> None:
        self.fail_clear = fail_clear
        self.handle = FakeNodeHandle()
        self.run_calls: list[tuple[str, int, list[bytes]]] = []
        self.bank_sends: list[tuple[str, str, str]] = []
        self.clear_calls = 0

    async def run_consensus_node(
        self,
        directory: str,
        covenant_quorum: int,
        covenant_public_keys: list[bytes],
    ) -> FakeNodeHandle:
        self.run_calls.append((directory, covenant_quorum, covenant_public_keys))
        return self.handle

    async def bank_send(self, address: str, amount: str, from_key: str) -> None:
        self.bank_sends.append((address, amount, from_key))

    async def clear_resources(self) -> None:
        self.clear_calls += 1
        if self.fail_clear:
            raise RuntimeError("container removal failed")


class FakeController:
    def __init__(self, chain: FakeChain, unavailable_queries: int = 0) -> None:
        self.chain = chain
        self.unavailable_queries = unavailable_queries
        self.started = False
        self.stopped = False
        self.fail_stop = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True
        if self.fail_stop:
            raise RuntimeError("controller stop failed")

    async def query_chain_tip(self) -> int:
        if self.unavailable_queries > 0:
            self.unavailable_queries -= 1
            raise ConnectionError("node not serving yet")

        return self.chain.tick()

    async def query_registered_actors(self) -> list[bytes]:
        self.chain.tick()
        return list(self.chain.actors)

    async def query_votes_at_height(self, height: int) -> list[bytes]:
        self.chain.tick()
        return list(self.chain.votes.get(height, set()))


class FakeConsumer:
    def __init__(self, chain: FakeChain) -> None:
        self.chain = chain

    async def query_latest_block_height(self) -> int:
        return self.chain.tick()

    async def query_is_block_finalized(self, height: int) -> bool:
        self.chain.tick()
        return height in self.chain.finalized

    async def query_latest_finalized_block(self) -> BlockInfo | None:
        self.chain.tick()
        if not self.chain.finalized:
            return None

        return BlockInfo(height=max(self.chain.finalized), finalized=True)


class FakeSigningClient:
    def __init__(self, address: str) -> None:
        self.address = address
        self.keys: dict[bytes, str] = {}
        self.closed = False
        self.fail_close = False

    async def create_key(self, name: str, passphrase: str, hd_path: str) -> bytes:
        public_key = b"\x02" + hashlib.sha256(name.encode()).digest()
        self.keys[public_key] = name
        return public_key

    async def key_record(self, public_key: bytes, passphrase: str) -> KeyRecord:
        if public_key not in self.keys:
            raise KeyError(public_key.hex())

        return KeyRecord(
            name=self.keys[public_key],
            private_key=hashlib.sha256(public_key + passphrase.encode()).digest(),
        )

    async def close(self) -> None:
        self.closed = True
        if self.fail_close:
            raise RuntimeError("signing client close failed")


class FakeInstanceHandle:
    def __init__(self, chain: FakeChain, public_key: bytes) -> None:
        self.chain = chain
        self._public_key = public_key
        self.last_voted_height = 0
        self.running = False
        self.start_calls = 0
        self.stop_calls = 0

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def get_last_voted_height(self) -> int:
        self.chain.tick()
        return self.last_voted_height

    async def start(self) -> None:
        self.start_calls += 1
        self.running = True

    async def stop(self) -> None:
        self.stop_calls += 1
        self.running = False


class FakeApplication:
    def __init__(
        self,
        chain: FakeChain,
        config: InstanceConfig,
        fail_create_actor: bool = False,
        fail_start: bool = False,
        fail_stop: bool = False,
    ) -> None:
        self.chain = chain
        self.config = config
        self.fail_create_actor = fail_create_actor
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.started = False
        self.stopped = False
        self.description: Description | None = None
        self.commission_rate: str | None = None
        self._handle: FakeInstanceHandle | None = None

    async def start(self) -> None:
        if self.fail_start:
            raise RuntimeError("application failed to start")

        self.started = True

    async def stop(self) -> None:
        self.stopped = True
        if self._handle is not None:
            await self._handle.stop()

        if self.fail_stop:
            raise RuntimeError("application stop failed")

    async def create_actor(
        self,
        key_name: str,
        chain_id: str,
        passphrase: str,
        signing_public_key: bytes,
        description: Description,
        commission_rate: str,
    ) -> bytes:
        if self.fail_create_actor:
            raise RuntimeError("actor registration rejected")

        self.description = description
        self.commission_rate = commission_rate
        self.chain.actors.append(signing_public_key)
        return signing_public_key

    async def start_actor(self, signing_public_key: bytes, passphrase: str) -> None:
        self._handle = FakeInstanceHandle(self.chain, signing_public_key)
        self.chain.voters[signing_public_key] = self._handle
        await self._handle.start()

    def get_instance(self) -> FakeInstanceHandle:
        if self._handle is None:
            raise RuntimeError("no actor started")

        return self._handle


class FakeServer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.cancelled = False

    async def run_until_shutdown(self) -> None:
        if self.fail:
            raise RuntimeError("listener failed")

        try:
            await asyncio.Event().wait()

        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FakeService(ManagedService):
    def __init__(
        self,
        name: str = "fake-service",
        ready_after: int = 0,
        fail_launch: bool = False,
        fail_shutdown: bool = False,
    ) -> None:
        super().__init__(name)
        self.ready_after = ready_after
        self.fail_launch = fail_launch
        self.fail_shutdown = fail_shutdown
        self.launch_calls = 0
        self.probe_calls = 0
        self.shutdown_calls = 0

    async def _launch(self) -> None:
        self.launch_calls += 1
        if self.fail_launch:
            raise OSError("executable not found")

    async def _probe(self) -> bool:
        self.probe_calls += 1
        if self.probe_calls <= self.ready_after:
            raise ConnectionRefusedError("not listening yet")

        return True

    async def _shutdown(self) -> None:
        self.shutdown_calls += 1
        if self.fail_shutdown:
            raise RuntimeError("shutdown failed")


class FakeBackend(HarnessBackend):
    def __init__(
        self,
        env: HarnessEnv,
        chain: FakeChain | None = None,
        controller_failures: int = 0,
        consumer_failures: int = 0,
        unavailable_queries: int = 0,
        fail_create_actor: bool = False,
        fail_actor_at: int | None = None,
        fail_create_application: bool = False,
        fail_application_start: bool = False,
        fail_server: bool = False,
        signing_service: ManagedService | None = None,
    ) -> None:
        super().__init__(env)
        self.chain = chain or FakeChain()
        self.controller_failures = controller_failures
        self.consumer_failures = consumer_failures
        self.unavailable_queries = unavailable_queries
        self.fail_create_actor = fail_create_actor
        self.fail_actor_at = fail_actor_at
        self.fail_create_application = fail_create_application
        self.fail_application_start = fail_application_start
        self.fail_server = fail_server
        self.signing_service = signing_service or FakeService("signing-service")

        self.controllers: list[FakeController] = []
        self.consumers: list[FakeConsumer] = []
        self.signing_clients: list[FakeSigningClient] = []
        self.applications: list[FakeApplication] = []
        self.servers: list[FakeServer] = []
        self.chain_keys: list[ChainKeyInfo] = []
        self.signing_configs: list[SigningServiceConfig] = []

    async def create_consensus_controller(self, config: InstanceConfig) -> FakeController:
        if self.controller_failures > 0:
            self.controller_failures -= 1
            raise ConnectionRefusedError("grpc endpoint not open")

        controller = FakeController(
            self.chain,
            unavailable_queries=self.unavailable_queries,
        )
        self.unavailable_queries = 0
        self.controllers.append(controller)
        return controller

    async def create_consumer_controller(self, config: InstanceConfig) -> FakeConsumer:
        if self.consumer_failures > 0:
            self.consumer_failures -= 1
            raise ConnectionRefusedError("rpc endpoint not open")

        consumer = FakeConsumer(self.chain)
        self.consumers.append(consumer)
        return consumer

    async def create_signing_client(self, address: str) -> FakeSigningClient:
        client = FakeSigningClient(address)
        self.signing_clients.append(client)
        return client

    async def create_chain_key(
        self,
        config: InstanceConfig,
        passphrase: str,
        hd_path: str,
    ) -> ChainKeyInfo:
        chain_key = ChainKeyInfo(
            name=config.key_name,
            address=f"bbn1{hashlib.sha256(config.key_name.encode()).hexdigest()[:38]}",
        )
        self.chain_keys.append(chain_key)
        return chain_key

    async def open_database(self, config: InstanceConfig) -> dict[str, Any]:
        return {"path": config.database_path}

    async def create_application(
        self,
        config: InstanceConfig,
        controller: FakeController,
        consumer: FakeConsumer,
        signing_client: FakeSigningClient,
        database: Any,
    ) -> FakeApplication:
        if self.fail_create_application:
            raise RuntimeError("application database is locked")

        application = FakeApplication(
            self.chain,
            config,
            fail_create_actor=(
                self.fail_create_actor
                or self.fail_actor_at == len(self.applications)
            ),
            fail_start=self.fail_application_start,
        )
        self.applications.append(application)
        return application

    async def create_application_server(
        self,
        config: InstanceConfig,
        application: FakeApplication,
        database: Any,
    ) -> FakeServer:
        server = FakeServer(fail=self.fail_server)
        self.servers.append(server)
        return server

    def create_signing_service(self, config: SigningServiceConfig) -> ManagedService:
        self.signing_configs.append(config)
        return self.signing_service
