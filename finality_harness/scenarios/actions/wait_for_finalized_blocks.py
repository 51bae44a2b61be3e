import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    count = int(action.params.get("count", 1))
    block = await manager.wait_for_n_finalized_blocks(count)
    previous = runtime.last_finalized_block
    runtime.last_finalized_block = block
    if previous is not None and block.height < previous.height:
        raise AssertionError(
            f"Finalized height regressed from {previous.height} to {block.height}"
        )
    return ActionOutcome(
        name="wait_for_finalized_blocks",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=f"finalized through height {block.height}",
    )
