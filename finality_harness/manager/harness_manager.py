"""
Orchestration of a multi-service finality test environment.

The manager stands up one consensus node and one signing service shared by
every application instance, adds instances on demand, and exposes waits for
the distributed properties tests assert on (actor registration, votes,
finalization). Every wait goes through the ConvergencePoller.

Bootstrap order is fixed: covenant committee, consensus node, consensus
controllers, signing service, readiness check. A failure at any step is
fatal to the bootstrap. Teardown always attempts every step and reports all
failures together.
"""

import asyncio
import os
from typing import Awaitable, Callable

from finality_harness.clients import (
    ApplicationApp,
    ApplicationInstanceHandle,
    ApplicationServer,
    ConsensusController,
    ConsumerController,
    HarnessBackend,
    SigningClient,
)
from finality_harness.env import HarnessEnv
from finality_harness.errors import TeardownError
from finality_harness.lifecycle import ConsensusNodeService, ContainerManager
from finality_harness.logging import Logger, LoggingConfig
from finality_harness.models import (
    BlockInfo,
    CovenantCommittee,
    Description,
    InstanceConfig,
    SigningServiceConfig,
)
from finality_harness.registry import ApplicationInstance, InstanceRegistry
from finality_harness.registry.logging_models import (
    InstanceDebug,
    InstanceError,
    InstanceInfo,
    InstanceWarning,
)
from finality_harness.reliability import (
    ConvergencePoller,
    RetryConfig,
    RetryExecutor,
)
from finality_harness.resources import ResourceAllocator

from .harness_environment import HarnessEnvironment
from .logging_models import ManagerError, ManagerInfo

ZERO_COMMISSION_RATE = "0"


class HarnessManager:
    """
    Façade over the resource allocator, service lifecycle, convergence poller
    and instance registry.

    Example usage:
        async with HarnessManager(backend, container_manager) as manager:
            handle = await manager.add_instance()
            await manager.wait_for_registered_actors(1)
            height = await manager.wait_for_vote_cast(handle)
            await manager.check_block_finalization(height, 1)
    """

    def __init__(
        self,
        backend: HarnessBackend,
        container_manager: ContainerManager,
        env: HarnessEnv | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._backend = backend
        self._container_manager = container_manager
        self._env = env or backend.env
        self._logger = logger or Logger()

        LoggingConfig().update(
            log_directory=self._env.HARNESS_LOGS_DIRECTORY,
            log_level=self._env.HARNESS_LOG_LEVEL,
            log_output=self._env.HARNESS_LOG_OUTPUT,
        )

        eventually_config = self._env.get_eventually_config()
        self._poller = ConvergencePoller(
            timeout=eventually_config['timeout'],
            poll_interval=eventually_config['poll_interval'],
            logger=self._logger,
        )
        self._construction_retry = RetryExecutor(
            RetryConfig(**self._env.get_construction_config()),
            logger=self._logger,
        )

        self.environment: HarnessEnvironment | None = None
        self._stopped = False

    @property
    def env(self) -> HarnessEnv:
        return self._env

    @property
    def poller(self) -> ConvergencePoller:
        return self._poller

    @property
    def logger(self) -> Logger:
        return self._logger

    @property
    def instances(self) -> list[ApplicationInstance]:
        if self.environment is None:
            return []

        return self.environment.registry.all()

    def require_environment(self) -> HarnessEnvironment:
        if self.environment is None:
            raise RuntimeError("Environment not bootstrapped")

        if self._stopped:
            raise RuntimeError("Environment already torn down")

        return self.environment

    async def __aenter__(self):
        try:
            await self.bootstrap()

        except BaseException:
            await self._stop_after_failure()
            raise

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.stop()

        else:
            await self._stop_after_failure()

    # =========================================================================
    # Bootstrap
    # =========================================================================

    async def bootstrap(self) -> HarnessEnvironment:
        if self._stopped:
            raise RuntimeError("Environment already torn down")

        if self.environment is not None:
            raise RuntimeError("Environment already bootstrapped")

        env = self._env

        allocator = ResourceAllocator(
            env.get_base_directory(),
            port_range=env.get_port_range(),
            port_allocation_attempts=env.HARNESS_PORT_ALLOCATION_ATTEMPTS,
        )

        # 1. Covenant committee authorizing the genesis configuration
        committee = CovenantCommittee.generate(
            env.HARNESS_COVENANT_COMMITTEE_SIZE,
            env.HARNESS_COVENANT_QUORUM,
        )

        # 2. Consensus node
        consensus_node = ConsensusNodeService(
            self._container_manager,
            allocator.allocate_directory("babylon-test-"),
            committee,
            logger=self._logger,
        )

        environment = HarnessEnvironment(
            allocator=allocator,
            committee=committee,
            chain_id=env.HARNESS_CHAIN_ID,
            consensus_node=consensus_node,
            registry=InstanceRegistry(logger=self._logger),
        )
        self.environment = environment

        await consensus_node.start()

        base_config = InstanceConfig(
            home_directory=os.path.join(allocator.base_directory, "fp-home"),
            key_directory=consensus_node.key_directory,
            chain_id=env.HARNESS_CHAIN_ID,
            keyring_backend=env.HARNESS_KEYRING_BACKEND,
            rpc_address=consensus_node.rpc_address,
            grpc_address=consensus_node.grpc_address,
        )

        # 3. Shared controllers, retried while the node opens its endpoints
        (
            environment.controller,
            environment.consumer,
        ) = await self._construction_retry.execute(
            lambda: self._create_controllers(base_config),
            operation_name="consensus controllers",
        )
        consensus_node.bind_probe(self._query_chain_tip)

        # 4. Signing service
        signing_config = SigningServiceConfig(
            home_directory=allocator.allocate_directory("eots-home-"),
            rpc_listener=f"127.0.0.1:{allocator.allocate_port()}",
            metrics_port=allocator.allocate_port(),
        )
        environment.signing_config = signing_config

        signing_service = self._backend.create_signing_service(signing_config)
        environment.signing_service = signing_service

        await signing_service.start()
        await signing_service.wait_ready(
            timeout=env.seconds('HARNESS_SERVICE_READY_TIMEOUT'),
            poll_interval=self._poller.poll_interval,
        )

        environment.base_config = base_config.with_updates(
            rpc_listener=f"127.0.0.1:{allocator.allocate_port()}",
            signing_service_address=signing_config.rpc_listener,
        )
        environment.signing_client = await self._backend.create_signing_client(
            signing_config.rpc_listener
        )

        # 5. Whole environment usable
        await self.wait_for_services_start()

        await self._logger.log(
            ManagerInfo(
                message=f"Environment bootstrapped with covenant quorum {committee.quorum} of {committee.size}",
                base_directory=environment.base_directory,
                chain_id=environment.chain_id,
            )
        )

        return environment

    async def _create_controllers(
        self,
        config: InstanceConfig,
    ) -> tuple[ConsensusController, ConsumerController]:
        controller = await self._backend.create_consensus_controller(config)
        await controller.start()

        try:
            consumer = await self._backend.create_consumer_controller(config)

        except Exception:
            await self._discard_controller(controller)
            raise

        return controller, consumer

    async def _discard_controller(self, controller: ConsensusController) -> None:
        try:
            await controller.stop()

        except Exception as err:
            await self._logger.log(
                ManagerError(
                    message=f"Failed to stop discarded consensus controller: {err}",
                )
            )

    async def _query_chain_tip(self) -> bool:
        controller, _ = self.require_environment().require_controllers()
        await controller.query_chain_tip()
        return True

    async def wait_for_services_start(self) -> None:
        environment = self.require_environment()
        await environment.consensus_node.wait_ready(
            timeout=self._poller.timeout,
            poll_interval=self._poller.poll_interval,
        )

        await self._logger.log(
            ManagerInfo(
                message="Consensus node is started",
                base_directory=environment.base_directory,
                chain_id=environment.chain_id,
            )
        )

    # =========================================================================
    # Application instances
    # =========================================================================

    async def add_instance(self) -> ApplicationInstanceHandle:
        """
        Create, fund, register and start one application instance.

        Nothing is added to the registry unless every step succeeds. If a step
        fails once the instance controller has started, everything the
        instance acquired so far is stopped or closed before the error
        propagates.
        """
        environment = self.require_environment()
        env = self._env
        allocator = environment.allocator
        passphrase = env.HARNESS_KEY_PASSPHRASE
        hd_path = env.HARNESS_KEY_HD_PATH

        # 1. Signing key
        signing_client = environment.require_signing_client()
        signing_public_key = await signing_client.create_key(
            allocator.allocate_key_name("eots-key"),
            passphrase,
            hd_path,
        )

        await self._logger.log(
            InstanceDebug(
                message=f"The signing key is created: {signing_public_key.hex()}",
                instance_id=signing_public_key.hex(),
            )
        )

        # 2. Funded chain account
        key_name = allocator.allocate_key_name("fp-key")
        config = environment.base_config.with_updates(
            key_name=key_name,
            key_directory=environment.base_directory,
            home_directory=allocator.allocate_directory("fp-"),
        )

        chain_key = await self._backend.create_chain_key(config, passphrase, hd_path)

        await self._logger.log(
            InstanceDebug(
                message=f"The chain key is created: {chain_key.address}",
                instance_id=signing_public_key.hex(),
                account_address=chain_key.address,
            )
        )

        await self._container_manager.bank_send(
            chain_key.address,
            env.HARNESS_FUNDING_AMOUNT,
            env.HARNESS_FUNDING_SOURCE_KEY,
        )

        controller: ConsensusController | None = None
        instance_signing_client: SigningClient | None = None
        application: ApplicationApp | None = None
        server_task: asyncio.Task | None = None

        try:
            # 3. Instance controllers bound to the shared node
            controller = await self._backend.create_consensus_controller(config)
            await controller.start()
            consumer = await self._backend.create_consumer_controller(config)

            # 4. Application
            instance_signing_client = await self._backend.create_signing_client(
                environment.signing_service_address
            )
            database = await self._backend.open_database(config)
            application = await self._backend.create_application(
                config,
                controller,
                consumer,
                instance_signing_client,
                database,
            )

            # 5. Start and register the actor on chain
            await application.start()
            await application.create_actor(
                key_name,
                environment.chain_id,
                passphrase,
                signing_public_key,
                Description(moniker=env.HARNESS_MONIKER),
                ZERO_COMMISSION_RATE,
            )

            # 6. Own ports, voting loop, RPC server
            rpc_port = allocator.allocate_port()
            metrics_port = allocator.allocate_port()
            config = config.with_updates(
                rpc_listener=f"127.0.0.1:{rpc_port}",
                metrics_port=metrics_port,
            )

            await application.start_actor(signing_public_key, passphrase)

            server = await self._backend.create_application_server(
                config,
                application,
                database,
            )
            server_task = asyncio.create_task(
                self._run_server(server, key_name, signing_public_key),
                name=f"server-{key_name}",
            )

            instance = ApplicationInstance(
                signing_public_key=signing_public_key,
                account_address=chain_key.address,
                key_name=key_name,
                config=config,
                rpc_port=rpc_port,
                metrics_port=metrics_port,
                controller=controller,
                consumer=consumer,
                signing_client=instance_signing_client,
                application=application,
                database=database,
                server_task=server_task,
            )
            handle = instance.handle

            # 7. Register
            await environment.registry.register(instance)

        except Exception:
            await self._rollback_instance(
                key_name,
                signing_public_key,
                server_task=server_task,
                application=application,
                signing_client=instance_signing_client,
                controller=controller,
            )
            raise

        return handle

    async def add_instances(
        self,
        count: int,
        concurrently: bool = False,
    ) -> list[ApplicationInstanceHandle]:
        """
        Add count instances, one after another or all at once.

        If any instance fails, the first error is raised once every started
        add_instance() call has finished. Instances that were added before
        or alongside the failure stay registered. They are reachable through
        `instances`, and stop() tears them down.
        """
        if count < 0:
            raise ValueError("count must be >= 0")

        results: list[ApplicationInstanceHandle | BaseException] = []

        if concurrently:
            results.extend(
                await asyncio.gather(
                    *[self.add_instance() for _ in range(count)],
                    return_exceptions=True,
                )
            )

        else:
            for _ in range(count):
                try:
                    results.append(await self.add_instance())

                except Exception as err:
                    results.append(err)
                    break

        handles = [
            result for result in results if not isinstance(result, BaseException)
        ]
        errors = [result for result in results if isinstance(result, BaseException)]

        if errors:
            error = errors[0]
            error.add_note(
                f"{len(handles)} of {count} instances were added and remain registered"
            )
            if len(errors) > 1:
                await self._logger.log(
                    ManagerError(
                        message=f"{len(errors)} of {count} instances failed to start",
                    )
                )

            raise error

        return handles

    async def _run_server(
        self,
        server: ApplicationServer,
        key_name: str,
        signing_public_key: bytes,
    ) -> None:
        try:
            await server.run_until_shutdown()

        except Exception as err:
            await self._logger.log(
                InstanceError(
                    message=f"Server for instance {key_name} exited with error: {err}",
                    instance_id=signing_public_key.hex(),
                )
            )

    async def _rollback_instance(
        self,
        key_name: str,
        signing_public_key: bytes,
        server_task: asyncio.Task | None = None,
        application: ApplicationApp | None = None,
        signing_client: SigningClient | None = None,
        controller: ConsensusController | None = None,
    ) -> None:
        """Release what an abandoned instance had acquired, newest first. Failures are logged."""
        if server_task is not None and not server_task.done():
            server_task.cancel()
            await asyncio.gather(server_task, return_exceptions=True)

        steps: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        if application is not None:
            steps.append(("application", application.stop))

        if signing_client is not None:
            steps.append(("signing client", signing_client.close))

        if controller is not None:
            steps.append(("consensus controller", controller.stop))

        for target, step in steps:
            try:
                await step()

            except Exception as err:
                await self._logger.log(
                    InstanceWarning(
                        message=f"Failed to stop {target} of abandoned instance {key_name}: {err}",
                        instance_id=signing_public_key.hex(),
                    )
                )

    async def get_signing_private_key(self, public_key: bytes) -> bytes:
        signing_client = self.require_environment().require_signing_client()
        record = await signing_client.key_record(
            public_key,
            self._env.HARNESS_KEY_PASSPHRASE,
        )

        return record.private_key

    # =========================================================================
    # Distributed property waits
    # =========================================================================

    async def wait_for_registered_actors(self, count: int) -> None:
        controller, _ = self.require_environment().require_controllers()

        async def actors_registered() -> bool:
            actors = await controller.query_registered_actors()
            return len(actors) == count

        await self._poller.eventually(
            actors_registered,
            f"exactly {count} registered actors",
        )

    async def check_block_finalization(self, height: int, num: int) -> None:
        """Waits for exactly num votes at height, then for height to be finalized."""
        controller, consumer = self.require_environment().require_controllers()

        async def votes_collected() -> bool:
            votes = await controller.query_votes_at_height(height)
            return len(votes) == num

        await self._poller.eventually(
            votes_collected,
            f"{num} votes at height {height}",
        )

        async def block_finalized() -> bool:
            return await consumer.query_is_block_finalized(height)

        await self._poller.eventually(
            block_finalized,
            f"block {height} finalized",
        )

    async def wait_for_vote_cast(self, handle: ApplicationInstanceHandle) -> int:
        last_voted_height = 0

        def voted() -> bool:
            nonlocal last_voted_height
            last_voted_height = handle.get_last_voted_height()
            return last_voted_height > 0

        await self._poller.eventually(
            voted,
            f"first vote by {handle.public_key.hex()}",
        )

        return last_voted_height

    async def stop_and_restart_after_n_blocks(
        self,
        count: int,
        handle: ApplicationInstanceHandle,
    ) -> None:
        environment = self.require_environment()
        _, consumer = environment.require_controllers()

        block_before_stop = await consumer.query_latest_block_height()
        await handle.stop()

        async def chain_advanced() -> bool:
            height_after_stop = await consumer.query_latest_block_height()
            return height_after_stop >= block_before_stop + count

        await self._poller.eventually(
            chain_advanced,
            f"chain height >= {block_before_stop + count}",
        )

        await self._logger.log(
            InstanceInfo(
                message="Restarting the finality-provider instance",
                instance_id=handle.public_key.hex(),
            )
        )

        await handle.start()

    async def wait_for_n_finalized_blocks(self, count: int) -> BlockInfo:
        """
        Waits until count consecutive blocks are finalized, counting from the
        first finalized block seen after the wait begins.
        """
        if count < 1:
            raise ValueError("count must be >= 1")

        _, consumer = self.require_environment().require_controllers()

        first_finalized_block: BlockInfo | None = None
        last_finalized_block: BlockInfo | None = None

        async def blocks_finalized() -> bool:
            nonlocal first_finalized_block, last_finalized_block

            last_finalized_block = await consumer.query_latest_finalized_block()
            if last_finalized_block is None:
                return False

            if first_finalized_block is None:
                first_finalized_block = last_finalized_block

            return (
                last_finalized_block.height - first_finalized_block.height
                >= count - 1
            )

        await self._poller.eventually(
            blocks_finalized,
            f"{count} finalized blocks",
        )

        await self._logger.log(
            ManagerInfo(
                message=f"The block is finalized at {last_finalized_block.height}",
                base_directory=self.environment.base_directory,
                chain_id=self.environment.chain_id,
            )
        )

        return last_finalized_block

    # =========================================================================
    # Teardown
    # =========================================================================

    async def stop(self) -> None:
        """
        Stop every instance, shared client and service, then delete the base
        directory. Runs once per bootstrapped environment; later calls return
        immediately, and a call before bootstrap() does nothing.

        Raises:
            TeardownError listing every step that failed
        """
        environment = self.environment
        if self._stopped or environment is None:
            return

        self._stopped = True

        errors: list[tuple[str, BaseException]] = []

        try:
            await environment.registry.stop_all()

        except TeardownError as teardown_error:
            errors.extend(teardown_error.errors)

        steps: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        if environment.controller is not None:
            steps.append(("consensus controller", environment.controller.stop))

        if environment.signing_client is not None:
            steps.append(("signing client", environment.signing_client.close))

        if environment.signing_service is not None:
            steps.append(("signing service", environment.signing_service.stop))

        steps.append(("consensus node", environment.consensus_node.stop))

        for target, step in steps:
            try:
                await step()

            except Exception as err:
                errors.append((target, err))
                await self._logger.log(
                    ManagerError(
                        message=f"Failed to stop {target}: {err}",
                        base_directory=environment.base_directory,
                        chain_id=environment.chain_id,
                    )
                )

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, environment.allocator.release_all)

        except OSError as err:
            errors.append(("base directory", err))

        environment.torn_down = True

        if errors:
            raise TeardownError(errors)

        await self._logger.log(
            ManagerInfo(
                message="Environment torn down",
                base_directory=environment.base_directory,
                chain_id=environment.chain_id,
            )
        )

    async def _stop_after_failure(self) -> None:
        try:
            await self.stop()

        except TeardownError as teardown_error:
            await self._logger.log(
                ManagerError(
                    message=f"Teardown after failure was incomplete: {teardown_error}",
                )
            )


async def start_manager_with_instances(
    backend: HarnessBackend,
    container_manager: ContainerManager,
    count: int,
    env: HarnessEnv | None = None,
    logger: Logger | None = None,
) -> tuple[HarnessManager, list[ApplicationInstanceHandle]]:
    """
    Bootstraps an environment, adds count instances and waits until the
    consensus node reports exactly count registered actors.

    The caller owns the returned manager and must stop() it.
    """
    manager = HarnessManager(
        backend,
        container_manager,
        env=env,
        logger=logger,
    )

    try:
        await manager.bootstrap()
        handles = await manager.add_instances(count)
        await manager.wait_for_registered_actors(count)

    except BaseException:
        await manager._stop_after_failure()
        raise

    await manager.logger.log(
        ManagerInfo(
            message=f"The test manager is running with {count} finality provider(s)",
            base_directory=manager.environment.base_directory,
            chain_id=manager.environment.chain_id,
        )
    )

    return manager, handles
