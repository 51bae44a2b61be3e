"""
Tests for port, directory and key name allocation.

Tests:
- Uniqueness of ports under concurrent allocation
- Exhaustion of small port ranges
- Directory creation beneath the run base directory and bulk removal
- Key name uniqueness
"""

import os
import socket
from concurrent.futures import ThreadPoolExecutor

import pytest

from finality_harness.errors import ResourceExhausted
from finality_harness.resources import (
    DirectoryAllocator,
    PortAllocator,
    ResourceAllocator,
)


# =============================================================================
# Ports
# =============================================================================


class TestPortAllocator:
    def test_allocated_port_is_in_range(self) -> None:
        allocator = PortAllocator(range_start=20000, range_end=30000)

        port = allocator.allocate()

        assert 20000 <= port < 30000
        assert port in allocator.allocated

    def test_invalid_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            PortAllocator(range_start=30000, range_end=20000)

    def test_ports_unique_under_concurrency(self) -> None:
        allocator = PortAllocator(range_start=20000, range_end=30000)

        with ThreadPoolExecutor(max_workers=8) as pool:
            ports = list(pool.map(lambda _: allocator.allocate(), range(64)))

        assert len(set(ports)) == 64

    def test_small_range_exhausts(self) -> None:
        allocator = PortAllocator(range_start=23000, range_end=23002, max_attempts=50)
        issued: list[int] = []

        with pytest.raises(ResourceExhausted) as exc_info:
            for _ in range(3):
                issued.append(allocator.allocate())

        assert exc_info.value.resource == "port"
        assert len(issued) <= 2

    def test_port_held_by_another_socket_is_skipped(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", 0))
            held_port = holder.getsockname()[1]

            allocator = PortAllocator(
                range_start=held_port,
                range_end=held_port + 1,
                max_attempts=5,
            )

            with pytest.raises(ResourceExhausted):
                allocator.allocate()

    def test_release_returns_port_to_pool(self) -> None:
        allocator = PortAllocator(range_start=24000, range_end=30000)
        port = allocator.allocate()

        allocator.release(port)

        assert port not in allocator.allocated


# =============================================================================
# Directories and key names
# =============================================================================


class TestDirectoryAllocator:
    def test_allocates_distinct_directories(self, tmp_path) -> None:
        allocator = DirectoryAllocator(str(tmp_path / "run"))

        first = allocator.allocate("fp-")
        second = allocator.allocate("fp-")

        assert first != second
        assert os.path.isdir(first)
        assert os.path.isdir(second)
        assert os.path.dirname(first) == allocator.base_directory

    def test_remove_all(self, tmp_path) -> None:
        allocator = DirectoryAllocator(str(tmp_path / "run"))
        allocator.allocate("eots-home-")

        allocator.remove_all()
        allocator.remove_all()

        assert not os.path.exists(allocator.base_directory)

    def test_unwritable_base_raises_resource_exhausted(self, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        allocator = DirectoryAllocator(str(blocker / "run"))

        with pytest.raises(ResourceExhausted):
            allocator.allocate("fp-")


class TestResourceAllocator:
    def test_base_directory_created_under_root(self, tmp_path) -> None:
        allocator = ResourceAllocator(str(tmp_path))

        assert os.path.isdir(allocator.base_directory)
        assert os.path.basename(allocator.base_directory).startswith("fp-e2e-test-")
        assert os.path.dirname(allocator.base_directory) == str(tmp_path)

    def test_release_all_removes_everything(self, tmp_path) -> None:
        allocator = ResourceAllocator(str(tmp_path))
        nested = allocator.allocate_directory("fp-")
        with open(os.path.join(nested, "finality-provider.db"), "w") as database:
            database.write("data")

        allocator.release_all()

        assert not os.path.exists(allocator.base_directory)

    def test_key_names_unique(self, tmp_path) -> None:
        allocator = ResourceAllocator(str(tmp_path))

        names = {allocator.allocate_key_name("eots-key") for _ in range(200)}

        assert len(names) == 200
        assert all(name.startswith("eots-key-") for name in names)

    def test_missing_root_raises_resource_exhausted(self, tmp_path) -> None:
        with pytest.raises(ResourceExhausted):
            ResourceAllocator(str(tmp_path / "missing" / "root"))

    def test_port_range_is_honored(self, tmp_path) -> None:
        allocator = ResourceAllocator(str(tmp_path), port_range=(25000, 25100))

        assert 25000 <= allocator.allocate_port() < 25100
