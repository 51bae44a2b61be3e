import os
import shutil
import tempfile
import threading

from finality_harness.errors import ResourceExhausted


class DirectoryAllocator:
    """Creates fresh, empty working directories under a single base directory."""

    def __init__(self, base_directory: str) -> None:
        self._base_directory = base_directory
        self._allocated: list[str] = []
        self._lock = threading.Lock()

    @property
    def base_directory(self) -> str:
        return self._base_directory

    @property
    def allocated(self) -> list[str]:
        with self._lock:
            return list(self._allocated)

    def allocate(self, prefix: str) -> str:
        try:
            os.makedirs(self._base_directory, exist_ok=True)
            path = tempfile.mkdtemp(prefix=prefix, dir=self._base_directory)

        except OSError as err:
            raise ResourceExhausted(
                f"directory '{prefix}*'",
                str(err),
            ) from err

        with self._lock:
            self._allocated.append(path)

        return path

    def remove_all(self) -> None:
        """Recursively deletes the base directory and everything allocated in it."""
        with self._lock:
            self._allocated.clear()

        if os.path.exists(self._base_directory):
            shutil.rmtree(self._base_directory)
