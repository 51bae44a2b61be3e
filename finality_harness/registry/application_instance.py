import asyncio
import contextlib
from dataclasses import dataclass, field
from typing import Any

from finality_harness.clients import (
    ApplicationApp,
    ApplicationInstanceHandle,
    ConsensusController,
    ConsumerController,
    SigningClient,
)
from finality_harness.models import InstanceConfig


@dataclass(slots=True)
class ApplicationInstance:
    """
    One actor under test and everything it exclusively owns.

    The consensus controllers and signing client point at services shared
    with every other instance. The ports, home directory and keys belong to
    this instance alone.
    """

    signing_public_key: bytes
    account_address: str
    key_name: str
    config: InstanceConfig
    rpc_port: int
    metrics_port: int
    controller: ConsensusController
    consumer: ConsumerController
    signing_client: SigningClient
    application: ApplicationApp
    database: Any = None
    server_task: asyncio.Task | None = None
    running: bool = True
    stop_error: BaseException | None = field(default=None)

    @property
    def instance_id(self) -> str:
        return self.signing_public_key.hex()

    @property
    def handle(self) -> ApplicationInstanceHandle:
        return self.application.get_instance()

    async def stop(self) -> None:
        """
        Stops the application and its server task. A second call is a no-op,
        including after a failed first call.
        """
        if not self.running:
            return

        self.running = False

        try:
            await self.application.stop()

        except Exception as err:
            self.stop_error = err
            raise

        finally:
            await self._stop_server()

    async def _stop_server(self) -> None:
        if self.server_task is None or self.server_task.done():
            return

        self.server_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self.server_task
