"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing the app
os.environ["TESTING"] = "true"

from glucosemonitor.core.cob_engine import EngineConfig, LogEntry
from glucosemonitor.main import app
from glucosemonitor.services.cob_settings import ConfigStore, get_config_store

NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)


def make_entry(
    minutes_ago: float,
    *,
    carbs: float = 0.0,
    insulin: float = 0.0,
    entry_id: str | None = None,
    meal_type: str | None = None,
    now: datetime = NOW,
) -> LogEntry:
    """Build a log entry timestamped ``minutes_ago`` before ``now``."""
    return LogEntry(
        id=entry_id or f"note-{minutes_ago:g}-{carbs:g}-{insulin:g}",
        timestamp=now - timedelta(minutes=minutes_ago),
        carbs=carbs,
        insulin=insulin,
        meal_type=meal_type,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def default_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def scenario_config() -> EngineConfig:
    """Reference configuration used in the documented dashboard scenarios."""
    return EngineConfig(
        carb_absorption_minutes=180,
        insulin_action_minutes=240,
        carb_peak_minutes=45,
        insulin_peak_minutes=75,
        carb_to_glucose_factor=0.05,
        insulin_to_glucose_factor=2.0,
    )


@pytest.fixture
def config_store() -> ConfigStore:
    """A fresh store per test so settings changes never leak between tests."""
    return ConfigStore(EngineConfig())


@pytest.fixture
async def client(config_store: ConfigStore) -> AsyncGenerator[AsyncClient, None]:
    """Async test client wired to the per-test config store."""
    app.dependency_overrides[get_config_store] = lambda: config_store
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_config_store, None)
