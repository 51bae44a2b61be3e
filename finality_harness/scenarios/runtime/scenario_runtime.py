from dataclasses import dataclass, field
import time

from finality_harness.clients import ApplicationInstanceHandle, HarnessBackend
from finality_harness.lifecycle import ContainerManager
from finality_harness.manager import HarnessManager
from finality_harness.models import BlockInfo
from finality_harness.scenarios.specs import ScenarioSpec


@dataclass(slots=True)
class ScenarioRuntime:
    spec: ScenarioSpec
    backend: HarnessBackend
    container_manager: ContainerManager
    manager: HarnessManager | None = None
    handles: dict[str, ApplicationInstanceHandle] = field(default_factory=dict)
    last_handle: ApplicationInstanceHandle | None = None
    last_voted_height: int | None = None
    last_finalized_block: BlockInfo | None = None
    started_at: float = field(default_factory=time.monotonic)

    async def bootstrap(self) -> None:
        if self.manager:
            raise RuntimeError("Environment already bootstrapped")
        self.manager = HarnessManager(
            self.backend,
            self.container_manager,
            env=self.spec.env,
        )
        await self.manager.bootstrap()

    async def teardown(self) -> None:
        if not self.manager:
            return
        manager = self.manager
        self.manager = None
        await manager.stop()

    def require_manager(self) -> HarnessManager:
        if not self.manager:
            raise RuntimeError("Environment not bootstrapped")
        return self.manager

    def add_handle(self, alias: str, handle: ApplicationInstanceHandle) -> None:
        if alias in self.handles:
            raise ValueError(f"Instance alias '{alias}' already in use")
        self.handles[alias] = handle
        self.last_handle = handle

    def resolve_handle(self, alias: str | None) -> ApplicationInstanceHandle:
        if alias is None:
            if self.last_handle is None:
                raise ValueError("No instance has been added")
            return self.last_handle
        if alias not in self.handles:
            raise ValueError(f"Unknown instance alias '{alias}'")
        return self.handles[alias]
