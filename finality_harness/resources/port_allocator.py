import random
import socket
import threading

from finality_harness.errors import ResourceExhausted


class PortAllocator:
    """
    Issues loopback ports that are unique for the lifetime of the allocator.

    Candidates are drawn at random from [range_start, range_end), skipped if
    already issued, and probed with a bind so ports held by other processes
    are not handed out. Safe to call from multiple threads and tasks.
    """

    def __init__(
        self,
        range_start: int = 20000,
        range_end: int = 30000,
        max_attempts: int = 100,
        host: str = "127.0.0.1",
    ) -> None:
        if not 0 < range_start < range_end <= 65536:
            raise ValueError(
                f"Invalid port range [{range_start}, {range_end})"
            )

        self._range_start = range_start
        self._range_end = range_end
        self._max_attempts = max_attempts
        self._host = host
        self._allocated: set[int] = set()
        self._lock = threading.Lock()
        self._random = random.Random()

    @property
    def allocated(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._allocated)

    def allocate(self) -> int:
        with self._lock:
            capacity = self._range_end - self._range_start
            if len(self._allocated) >= capacity:
                raise ResourceExhausted(
                    "port",
                    f"all {capacity} ports in [{self._range_start}, {self._range_end}) are allocated",
                )

            last_error: OSError | None = None
            for _ in range(self._max_attempts):
                port = self._random.randrange(self._range_start, self._range_end)
                if port in self._allocated:
                    continue

                try:
                    self._probe(port)

                except OSError as err:
                    last_error = err
                    continue

                self._allocated.add(port)
                return port

            reason = f"no free port found after {self._max_attempts} attempts"
            if last_error is not None:
                reason = f"{reason} (last error: {last_error})"

            raise ResourceExhausted("port", reason)

    def release(self, port: int) -> None:
        with self._lock:
            self._allocated.discard(port)

    def _probe(self, port: int) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
            probe.bind((self._host, port))
