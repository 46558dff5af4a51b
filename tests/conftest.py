"""Pytest configuration and fixtures."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from metrika.config import MetrikaSettings, reset_settings
from metrika.health import HealthManager
from metrika.models.enums import QuantityType, WorkoutActivityType
from metrika.models.samples import QuantitySample, Workout
from metrika.store.memory import InMemoryHealthStore


# Fixed "now" used by manager and cache tests
NOW = datetime(2026, 10, 19, 14, 30)


@pytest.fixture(autouse=True)
def _reset_global_settings():
    """Keep the settings singleton from leaking between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the store at a temporary file."""
    return MetrikaSettings(store_path=tmp_path / "health.json")


@pytest.fixture
def make_sample():
    """Factory for instantaneous samples."""

    def _create(quantity_type: QuantityType, value: float, when: datetime):
        return QuantitySample.at(quantity_type, value, when)

    return _create


@pytest.fixture
def make_workout():
    """Factory for workouts starting at ``start`` and lasting ``minutes``."""

    def _create(
        start: datetime,
        minutes: int = 30,
        activity: WorkoutActivityType = WorkoutActivityType.RUNNING,
        energy: float = None,
    ):
        return Workout(
            activity_type=activity,
            start=start,
            end=start + timedelta(minutes=minutes),
            total_energy_kcal=energy,
        )

    return _create


@pytest.fixture
def store():
    """Available, authorized, empty in-memory store."""
    store = InMemoryHealthStore()
    store.request_authorization(HealthManager.READ_TYPES, HealthManager.WRITE_TYPES)
    return store


@pytest.fixture
def seed(store):
    """Save samples of types the manager never writes, such as exercise time."""

    def _seed(*samples):
        store.request_authorization([], [s.quantity_type for s in samples])
        for sample in samples:
            store.save(sample)

    return _seed


@pytest.fixture
def manager(store, settings):
    """HealthManager over the in-memory store with a fixed clock."""
    manager = HealthManager(store, settings=settings, clock=lambda: NOW)
    yield manager
    manager.close()
