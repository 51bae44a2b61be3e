from .clients import HarnessBackend as HarnessBackend
from .env import (
    HarnessEnv as HarnessEnv,
    load_env as load_env,
)
from .errors import (
    ConstructionFailed as ConstructionFailed,
    ConvergenceTimeout as ConvergenceTimeout,
    HarnessError as HarnessError,
    InvalidServiceTransition as InvalidServiceTransition,
    ResourceExhausted as ResourceExhausted,
    ServiceUnavailable as ServiceUnavailable,
    TeardownError as TeardownError,
)
from .lifecycle import ContainerManager as ContainerManager
from .manager import (
    HarnessEnvironment as HarnessEnvironment,
    HarnessManager as HarnessManager,
    start_manager_with_instances as start_manager_with_instances,
)
from .models import (
    BlockInfo as BlockInfo,
    CovenantCommittee as CovenantCommittee,
    InstanceConfig as InstanceConfig,
)
from .reliability import (
    ConvergencePoller as ConvergencePoller,
    RetryConfig as RetryConfig,
    RetryExecutor as RetryExecutor,
)
from .resources import ResourceAllocator as ResourceAllocator
