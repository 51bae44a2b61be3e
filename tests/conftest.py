"""
Pytest configuration for the harness test suite.

Async tests are marked with @pytest.mark.asyncio. Every environment built
here lives under pytest's tmp_path and uses short convergence budgets so
failure paths time out quickly.
"""

import pytest

from finality_harness.env import HarnessEnv

from tests.unit.fakes import (
    FakeBackend,
    FakeChain,
    FakeContainerManager,
)


@pytest.fixture
def harness_env(tmp_path) -> HarnessEnv:
    return HarnessEnv(
        HARNESS_EVENTUALLY_TIMEOUT="2s",
        HARNESS_EVENTUALLY_POLL_INTERVAL="0.01s",
        HARNESS_CONSTRUCTION_TIMEOUT="1s",
        HARNESS_CONSTRUCTION_POLL_INTERVAL="0.01s",
        HARNESS_SERVICE_READY_TIMEOUT="1s",
        HARNESS_SERVICE_STOP_GRACE_PERIOD="1s",
        HARNESS_BASE_DIRECTORY=str(tmp_path),
    )


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def container_manager() -> FakeContainerManager:
    return FakeContainerManager()


@pytest.fixture
def backend(harness_env: HarnessEnv, chain: FakeChain) -> FakeBackend:
    return FakeBackend(harness_env, chain=chain)
