from __future__ import annotations

import os

from pydantic import BaseModel, StrictInt, StrictStr


class InstanceConfig(BaseModel):
    """Configuration handed to one application instance and its clients."""

    home_directory: StrictStr
    key_directory: StrictStr
    key_name: StrictStr = ""
    chain_id: StrictStr = "chain-test"
    keyring_backend: StrictStr = "test"
    rpc_address: StrictStr = ""
    grpc_address: StrictStr = ""
    rpc_listener: StrictStr = ""
    metrics_port: StrictInt = 0
    signing_service_address: StrictStr = ""

    @property
    def database_path(self) -> str:
        return os.path.join(self.home_directory, "data", "finality-provider.db")

    def with_updates(self, **updates) -> InstanceConfig:
        return self.model_copy(update=updates)


class SigningServiceConfig(BaseModel):
    home_directory: StrictStr
    rpc_listener: StrictStr
    metrics_port: StrictInt
