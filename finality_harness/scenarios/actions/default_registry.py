from .action_registry import ActionRegistry
from .add_instances import run as add_instances
from .bootstrap import run as bootstrap
from .check_finalization import run as check_finalization
from .sleep_action import run as sleep_action
from .stop_and_restart import run as stop_and_restart
from .teardown import run as teardown
from .wait_for_actors import run as wait_for_actors
from .wait_for_finalized_blocks import run as wait_for_finalized_blocks
from .wait_for_vote import run as wait_for_vote


def build_default_registry() -> ActionRegistry:
    registry = ActionRegistry()
    registry.register("bootstrap", bootstrap)
    registry.register("add_instances", add_instances)
    registry.register("wait_for_actors", wait_for_actors)
    registry.register("wait_for_vote", wait_for_vote)
    registry.register("check_finalization", check_finalization)
    registry.register("wait_for_finalized_blocks", wait_for_finalized_blocks)
    registry.register("stop_and_restart", stop_and_restart)
    registry.register("sleep", sleep_action)
    registry.register("teardown", teardown)
    return registry
