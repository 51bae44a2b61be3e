import secrets
import tempfile
import threading

from finality_harness.errors import ResourceExhausted

from .directory_allocator import DirectoryAllocator
from .port_allocator import PortAllocator


class ResourceAllocator:
    """
    Issues non-conflicting ports, directories and key names for one test run.

    The run's base directory is created on construction. Every directory
    handed out afterwards lives beneath it, so removing the base directory
    releases all of them.
    """

    def __init__(
        self,
        root_directory: str,
        run_prefix: str = "fp-e2e-test-",
        port_range: tuple[int, int] = (20000, 30000),
        port_allocation_attempts: int = 100,
    ) -> None:
        try:
            base_directory = tempfile.mkdtemp(prefix=run_prefix, dir=root_directory)

        except OSError as err:
            raise ResourceExhausted(
                f"directory '{run_prefix}*'",
                str(err),
            ) from err

        range_start, range_end = port_range

        self.ports = PortAllocator(
            range_start=range_start,
            range_end=range_end,
            max_attempts=port_allocation_attempts,
        )
        self.directories = DirectoryAllocator(base_directory)

        self._key_names: set[str] = set()
        self._lock = threading.Lock()

    @property
    def base_directory(self) -> str:
        return self.directories.base_directory

    def allocate_port(self) -> int:
        return self.ports.allocate()

    def allocate_directory(self, prefix: str) -> str:
        return self.directories.allocate(prefix)

    def allocate_key_name(self, prefix: str) -> str:
        with self._lock:
            while True:
                key_name = f"{prefix}-{secrets.token_hex(4)}"
                if key_name not in self._key_names:
                    self._key_names.add(key_name)
                    return key_name

    def release_all(self) -> None:
        self.directories.remove_all()
