"""
Exceptions raised by the finality harness.

Setup failures (allocation, readiness, construction) propagate and abort
the current bootstrap or add-instance step. Teardown failures are collected
into a single TeardownError so that every remaining target is still cleaned up.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""
    pass


class ResourceExhausted(HarnessError):
    """
    Raised when the allocator cannot issue a port or directory.

    Not retried: the operating system refused the allocation or the
    configured port range has no free entries left.
    """

    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"Unable to allocate {resource}: {reason}")


class ServiceUnavailable(HarnessError):
    """Raised when a managed service fails its readiness probe within its startup budget."""

    def __init__(
        self,
        service_name: str,
        timeout: float,
        last_error: BaseException | None = None,
    ) -> None:
        self.service_name = service_name
        self.timeout = timeout
        self.last_error = last_error

        message = f"Service '{service_name}' was not ready after {timeout:.2f}s"
        if last_error is not None:
            message = f"{message} (last error: {last_error!r})"

        super().__init__(message)


class ConvergenceTimeout(HarnessError):
    """
    Raised when a distributed property did not hold within its budget.

    Carries the last error raised by the predicate, if any, for diagnostics.
    """

    def __init__(
        self,
        description: str,
        timeout: float,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.attempts = attempts
        self.last_error = last_error

        message = (
            f"Condition '{description}' not satisfied after {timeout:.2f}s "
            f"({attempts} attempts)"
        )
        if last_error is not None:
            message = f"{message} (last error: {last_error!r})"

        super().__init__(message)


class ConstructionFailed(HarnessError):
    """Raised when a client or instance could not be built."""

    def __init__(
        self,
        operation_name: str,
        attempts: int = 1,
        last_error: BaseException | None = None,
    ) -> None:
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error

        message = f"Failed to construct {operation_name} after {attempts} attempt(s)"
        if last_error is not None:
            message = f"{message}: {last_error!r}"

        super().__init__(message)


class InvalidServiceTransition(HarnessError):
    def __init__(self, service_name: str, from_state: str, to_state: str) -> None:
        self.service_name = service_name
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Service '{service_name}' cannot transition from {from_state} to {to_state}"
        )


class TeardownError(HarnessError):
    """
    Raised after a teardown pass that had one or more failures.

    Every target is attempted before this is raised; `errors` holds
    (target, exception) pairs in the order they occurred.
    """

    def __init__(self, errors: list[tuple[str, BaseException]]) -> None:
        self.errors = errors

        details = "; ".join(
            f"{target}: {error!r}" for target, error in errors
        )

        super().__init__(f"Teardown finished with {len(errors)} failure(s): {details}")
