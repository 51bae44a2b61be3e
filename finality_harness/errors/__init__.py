from .harness_errors import (
    ConstructionFailed as ConstructionFailed,
    ConvergenceTimeout as ConvergenceTimeout,
    HarnessError as HarnessError,
    InvalidServiceTransition as InvalidServiceTransition,
    ResourceExhausted as ResourceExhausted,
    ServiceUnavailable as ServiceUnavailable,
    TeardownError as TeardownError,
)
