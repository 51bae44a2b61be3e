from .backend import HarnessBackend as HarnessBackend
from .protocols import (
    ApplicationApp as ApplicationApp,
    ApplicationInstanceHandle as ApplicationInstanceHandle,
    ApplicationServer as ApplicationServer,
    ConsensusController as ConsensusController,
    ConsumerController as ConsumerController,
    SigningClient as SigningClient,
)
