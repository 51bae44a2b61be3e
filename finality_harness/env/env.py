from __future__ import annotations

import os
import tempfile
from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictInt, StrictStr

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]


class HarnessEnv(BaseModel):
    HARNESS_EVENTUALLY_TIMEOUT: StrictStr = "5m"
    HARNESS_EVENTUALLY_POLL_INTERVAL: StrictStr = "0.5s"
    HARNESS_CONSTRUCTION_TIMEOUT: StrictStr = "5s"
    HARNESS_CONSTRUCTION_POLL_INTERVAL: StrictStr = "0.5s"
    HARNESS_SERVICE_READY_TIMEOUT: StrictStr = "30s"
    HARNESS_SERVICE_STOP_GRACE_PERIOD: StrictStr = "5s"

    HARNESS_COVENANT_COMMITTEE_SIZE: StrictInt = 3
    HARNESS_COVENANT_QUORUM: StrictInt = 2

    HARNESS_CHAIN_ID: StrictStr = "chain-test"
    HARNESS_MONIKER: StrictStr = "test-moniker"
    HARNESS_KEY_PASSPHRASE: StrictStr = "testpass"
    HARNESS_KEY_HD_PATH: StrictStr = ""
    HARNESS_KEYRING_BACKEND: StrictStr = "test"
    HARNESS_FUNDING_AMOUNT: StrictStr = "1000000ubbn"
    HARNESS_FUNDING_SOURCE_KEY: StrictStr = "node0"

    HARNESS_PORT_RANGE_START: StrictInt = 20000
    HARNESS_PORT_RANGE_END: StrictInt = 30000
    HARNESS_PORT_ALLOCATION_ATTEMPTS: StrictInt = 100

    HARNESS_SIGNING_SERVICE_BINARY: StrictStr = "eotsd"
    HARNESS_BASE_DIRECTORY: StrictStr = tempfile.gettempdir()

    HARNESS_LOG_LEVEL: Literal[
        "trace", "debug", "info", "warn", "error", "critical", "fatal"
    ] = "error"
    HARNESS_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    HARNESS_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "HARNESS_EVENTUALLY_TIMEOUT": str,
            "HARNESS_EVENTUALLY_POLL_INTERVAL": str,
            "HARNESS_CONSTRUCTION_TIMEOUT": str,
            "HARNESS_CONSTRUCTION_POLL_INTERVAL": str,
            "HARNESS_SERVICE_READY_TIMEOUT": str,
            "HARNESS_SERVICE_STOP_GRACE_PERIOD": str,
            "HARNESS_COVENANT_COMMITTEE_SIZE": int,
            "HARNESS_COVENANT_QUORUM": int,
            "HARNESS_CHAIN_ID": str,
            "HARNESS_MONIKER": str,
            "HARNESS_KEY_PASSPHRASE": str,
            "HARNESS_KEY_HD_PATH": str,
            "HARNESS_KEYRING_BACKEND": str,
            "HARNESS_FUNDING_AMOUNT": str,
            "HARNESS_FUNDING_SOURCE_KEY": str,
            "HARNESS_PORT_RANGE_START": int,
            "HARNESS_PORT_RANGE_END": int,
            "HARNESS_PORT_ALLOCATION_ATTEMPTS": int,
            "HARNESS_SIGNING_SERVICE_BINARY": str,
            "HARNESS_BASE_DIRECTORY": str,
            "HARNESS_LOG_LEVEL": str,
            "HARNESS_LOG_OUTPUT": str,
            "HARNESS_LOGS_DIRECTORY": str,
        }

    def seconds(self, field_name: str) -> float:
        return TimeParser().parse(getattr(self, field_name))

    def get_eventually_config(self) -> dict:
        """Timeout and poll interval used by every convergence wait."""
        return {
            'timeout': self.seconds('HARNESS_EVENTUALLY_TIMEOUT'),
            'poll_interval': self.seconds('HARNESS_EVENTUALLY_POLL_INTERVAL'),
        }

    def get_construction_config(self) -> dict:
        """Timeout and poll interval used when retrying client construction."""
        return {
            'timeout': self.seconds('HARNESS_CONSTRUCTION_TIMEOUT'),
            'poll_interval': self.seconds('HARNESS_CONSTRUCTION_POLL_INTERVAL'),
        }

    def get_port_range(self) -> tuple[int, int]:
        return (
            self.HARNESS_PORT_RANGE_START,
            self.HARNESS_PORT_RANGE_END,
        )

    def get_base_directory(self) -> str:
        return os.path.abspath(self.HARNESS_BASE_DIRECTORY)
