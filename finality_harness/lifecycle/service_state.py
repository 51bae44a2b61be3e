from dataclasses import dataclass
from enum import Enum


class ServiceState(Enum):
    NOT_STARTED = "not_started"
    STARTING = "starting"    # Spawned, health check not yet passed
    RUNNING = "running"      # Health check passed at least once
    STOPPING = "stopping"
    STOPPED = "stopped"
    FAILED = "failed"


VALID_TRANSITIONS: dict[ServiceState, set[ServiceState]] = {
    ServiceState.NOT_STARTED: {
        ServiceState.STARTING,
        ServiceState.STOPPED,     # Stop before start is a no-op shutdown
    },

    ServiceState.STARTING: {
        ServiceState.RUNNING,
        ServiceState.FAILED,      # Spawn failed or readiness budget exhausted
        ServiceState.STOPPING,
    },

    ServiceState.RUNNING: {
        ServiceState.STOPPING,
        ServiceState.FAILED,
    },

    ServiceState.STOPPING: {
        ServiceState.STOPPED,
        ServiceState.FAILED,
    },

    ServiceState.STOPPED: {
        ServiceState.STARTING,    # Restart
    },

    ServiceState.FAILED: {
        ServiceState.STOPPING,    # Release whatever was spawned
    },
}


@dataclass(slots=True)
class StateTransition:
    from_state: ServiceState
    to_state: ServiceState
    timestamp: float
    reason: str
