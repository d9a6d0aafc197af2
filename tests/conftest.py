"""Shared fixtures for Fuel Points tests."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from fuelpoints.config import EngineConfig
from fuelpoints.coordinator import ProgressionCoordinator
from fuelpoints.store import InMemoryEligibilityOracle, InMemoryProgressStore
from tests.helpers import FakeClock, make_local_dt

NEW_YORK = ZoneInfo("America/New_York")


@pytest.fixture
def tz() -> ZoneInfo:
    """Reference timezone used throughout the tests."""
    return NEW_YORK


@pytest.fixture
def config() -> EngineConfig:
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def clock() -> FakeClock:
    """Controllable wall clock starting at noon local on 2025-01-15."""
    return FakeClock(make_local_dt(2025, 1, 15, 12, 0))


@pytest.fixture
def store(tz: ZoneInfo, clock: FakeClock) -> InMemoryProgressStore:
    """Progress store with one player, "player-1", at 0 FP."""
    progress_store = InMemoryProgressStore(tz, now_func=clock.now)
    progress_store.add_player("player-1")
    return progress_store


@pytest.fixture
def oracle() -> InMemoryEligibilityOracle:
    """Eligibility oracle with no credits, devices or registrations."""
    return InMemoryEligibilityOracle()


@pytest.fixture
def coordinator(
    store: InMemoryProgressStore,
    oracle: InMemoryEligibilityOracle,
    config: EngineConfig,
    clock: FakeClock,
) -> ProgressionCoordinator:
    """Coordinator wired to the in-memory collaborators and the fake clock.

    Not set up: tests that need the reset loop call async_setup() themselves.
    """
    return ProgressionCoordinator(
        store, oracle, config=config, now_func=clock.now, sleep=clock.sleep
    )


@pytest.fixture
def noon() -> datetime:
    """Noon local on 2025-01-15."""
    return make_local_dt(2025, 1, 15, 12, 0)
