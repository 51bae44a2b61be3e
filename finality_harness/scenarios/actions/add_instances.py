import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    aliases = action.params.get("aliases")
    count = int(action.params.get("count", len(aliases) if aliases else 1))
    if count < 1:
        raise ValueError("add_instances requires count >= 1")
    if aliases is None:
        offset = len(runtime.handles)
        aliases = [f"instance-{offset + index}" for index in range(count)]
    if len(aliases) != count:
        raise ValueError("add_instances aliases must match count")
    concurrently = bool(action.params.get("concurrently", False))
    handles = await manager.add_instances(count, concurrently=concurrently)
    for alias, handle in zip(aliases, handles):
        runtime.add_handle(alias, handle)
    return ActionOutcome(
        name="add_instances",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=", ".join(aliases),
    )
