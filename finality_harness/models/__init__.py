from .block_info import BlockInfo as BlockInfo
from .covenant_committee import CovenantCommittee as CovenantCommittee
from .description import Description as Description
from .instance_config import (
    InstanceConfig as InstanceConfig,
    SigningServiceConfig as SigningServiceConfig,
)
from .key_record import (
    ChainKeyInfo as ChainKeyInfo,
    KeyRecord as KeyRecord,
)
