import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    alias = action.params.get("instance")
    handle = runtime.resolve_handle(alias)
    blocks = int(action.params.get("blocks", 1))
    await manager.stop_and_restart_after_n_blocks(blocks, handle)
    return ActionOutcome(
        name="stop_and_restart",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=f"{alias or 'last instance'} restarted after {blocks} blocks",
    )
