from .harness_environment import HarnessEnvironment as HarnessEnvironment
from .harness_manager import (
    HarnessManager as HarnessManager,
    start_manager_with_instances as start_manager_with_instances,
)
