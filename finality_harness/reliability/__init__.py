from .convergence import (
    ConvergenceCheck as ConvergenceCheck,
    ConvergencePoller as ConvergencePoller,
)
from .retry import (
    CONSTRUCTION_RETRY as CONSTRUCTION_RETRY,
    CONVERGENCE_RETRY as CONVERGENCE_RETRY,
    RetryConfig as RetryConfig,
    RetryExecutor as RetryExecutor,
    add_jitter as add_jitter,
)
