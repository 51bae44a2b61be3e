from .consensus_node import ConsensusNodeService as ConsensusNodeService
from .container_manager import (
    ConsensusNodeHandle as ConsensusNodeHandle,
    ContainerManager as ContainerManager,
)
from .managed_service import ManagedService as ManagedService
from .probes import (
    parse_address as parse_address,
    tcp_probe as tcp_probe,
)
from .process_service import ProcessService as ProcessService
from .service_state import (
    VALID_TRANSITIONS as VALID_TRANSITIONS,
    ServiceState as ServiceState,
    StateTransition as StateTransition,
)
from .signing_service import (
    CONFIG_FILENAME as CONFIG_FILENAME,
    SigningService as SigningService,
    override_config_values as override_config_values,
)
