import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    height = action.params.get("height", runtime.last_voted_height)
    if height is None:
        raise ValueError("check_finalization requires a height or a prior vote")
    votes = int(action.params.get("votes", max(len(runtime.handles), 1)))
    await manager.check_block_finalization(int(height), votes)
    return ActionOutcome(
        name="check_finalization",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=f"height {height} finalized with {votes} votes",
    )
