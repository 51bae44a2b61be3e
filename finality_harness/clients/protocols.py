"""
Interfaces of the external collaborators the harness drives.

The consensus node, the signing service and the application under test are
not implemented here. The harness only talks to them through these protocols.
"""

from typing import Any, Protocol

from finality_harness.models import BlockInfo, Description, KeyRecord


class ConsensusController(Protocol):
    """Privileged client bound to the consensus node."""

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...

    async def query_chain_tip(self) -> Any:
        ...

    async def query_registered_actors(self) -> list[Any]:
        ...

    async def query_votes_at_height(self, height: int) -> list[Any]:
        ...


class ConsumerController(Protocol):
    """Read-oriented client bound to the consensus node."""

    async def query_latest_block_height(self) -> int:
        ...

    async def query_is_block_finalized(self, height: int) -> bool:
        ...

    async def query_latest_finalized_block(self) -> BlockInfo | None:
        ...


class SigningClient(Protocol):
    async def create_key(self, name: str, passphrase: str, hd_path: str) -> bytes:
        ...

    async def key_record(self, public_key: bytes, passphrase: str) -> KeyRecord:
        ...

    async def close(self) -> None:
        ...


class ApplicationInstanceHandle(Protocol):
    """A running actor inside an application, used for vote queries and restarts."""

    @property
    def public_key(self) -> bytes:
        ...

    def get_last_voted_height(self) -> int:
        ...

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class ApplicationApp(Protocol):
    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...

    async def create_actor(
        self,
        key_name: str,
        chain_id: str,
        passphrase: str,
        signing_public_key: bytes,
        description: Description,
        commission_rate: str,
    ) -> Any:
        ...

    async def start_actor(self, signing_public_key: bytes, passphrase: str) -> None:
        ...

    def get_instance(self) -> ApplicationInstanceHandle:
        ...


class ApplicationServer(Protocol):
    async def run_until_shutdown(self) -> None:
        ...

