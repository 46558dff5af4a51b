"""Unit tests for HealthManager."""

import asyncio
import io
import json
import threading
import pytest
from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from metrika.exceptions import StoreReadError, StoreWriteError
from metrika.health import HealthManager
from metrika.logging import configure_logging
from metrika.models import QuantitySample, QuantityType, Unit, Workout
from metrika.store import InMemoryHealthStore

NOW = datetime(2026, 10, 19, 14, 30)
TODAY = datetime(2026, 10, 19)


def _log_entries(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestAuthorization:
    """Tests for request_authorization."""

    def test_granted(self, store, settings):
        manager = HealthManager(store, settings=settings)
        assert manager.request_authorization() is True

    def test_denied(self, settings):
        manager = HealthManager(InMemoryHealthStore(grant_authorization=False), settings=settings)
        assert manager.request_authorization() is False

    def test_unavailable_is_false_and_logged_once(self, settings):
        """An unavailable store is reported once and every read degrades."""
        stream = io.StringIO()
        configure_logging(log_level="DEBUG", log_format="json", stream=stream)
        manager = HealthManager(InMemoryHealthStore(available=False), settings=settings)

        assert manager.request_authorization() is False
        assert manager.fetch_latest_weight() is None
        assert manager.fetch_today_water_intake() == 0.0

        events = [e["event"] for e in _log_entries(stream)]
        assert events.count("store_unavailable") == 1


class TestReads:
    """Tests for read operations."""

    def test_latest_weight_empty(self, manager):
        assert manager.fetch_latest_weight() is None

    def test_latest_weight(self, manager, store, make_sample):
        store.save(make_sample(QuantityType.BODY_MASS, 73.0, NOW - timedelta(days=2)))
        latest = make_sample(QuantityType.BODY_MASS, 72.5, NOW - timedelta(hours=1))
        store.save(latest)

        assert manager.fetch_latest_weight() == latest

    def test_today_water_intake(self, manager, store, make_sample):
        """Only samples since the start of today are summed, in liters."""
        store.save(make_sample(QuantityType.DIETARY_WATER, 0.25, TODAY + timedelta(hours=8)))
        store.save(QuantitySample.at(QuantityType.DIETARY_WATER, 750, TODAY + timedelta(hours=12), unit=Unit.MILLILITER))
        store.save(make_sample(QuantityType.DIETARY_WATER, 2.0, TODAY - timedelta(minutes=1)))

        assert manager.fetch_today_water_intake() == pytest.approx(1.0)

    def test_today_water_intake_empty(self, manager):
        assert manager.fetch_today_water_intake() == 0.0

    def test_today_exercise_and_energy(self, manager, seed, make_sample):
        seed(
            make_sample(QuantityType.EXERCISE_TIME, 30, TODAY + timedelta(hours=7)),
            make_sample(QuantityType.EXERCISE_TIME, 15, TODAY + timedelta(hours=9)),
            make_sample(QuantityType.EXERCISE_TIME, 60, TODAY - timedelta(hours=1)),
            make_sample(QuantityType.ACTIVE_ENERGY, 420, TODAY + timedelta(hours=9)),
        )

        assert manager.fetch_today_exercise_time() == pytest.approx(45)
        assert manager.fetch_today_active_energy() == pytest.approx(420)

    def test_weight_history_window_and_order(self, manager, store, make_sample):
        inside_old = make_sample(QuantityType.BODY_MASS, 74.0, datetime(2026, 9, 20, 7))
        inside_new = make_sample(QuantityType.BODY_MASS, 72.0, datetime(2026, 10, 18, 7))
        outside = make_sample(QuantityType.BODY_MASS, 80.0, datetime(2026, 9, 19, 23))
        for sample in (inside_new, outside, inside_old):
            store.save(sample)

        history = manager.fetch_weight_history()

        assert history == [inside_old, inside_new]

    def test_weight_history_custom_days(self, manager, store, make_sample):
        store.save(make_sample(QuantityType.BODY_MASS, 74.0, datetime(2026, 10, 10, 7)))
        assert manager.fetch_weight_history(days=7) == []

    @pytest.mark.parametrize(
        "fetch",
        ["fetch_weight_history", "fetch_water_intake_history", "fetch_workouts_for_last_week"],
    )
    def test_zero_day_window_rejected(self, manager, fetch):
        with pytest.raises(ValueError):
            getattr(manager, fetch)(days=0)

    def test_water_history_zero_filled(self, manager, store, make_sample):
        """Every day of the window is present, days without samples are zero."""
        store.save(make_sample(QuantityType.DIETARY_WATER, 0.25, datetime(2026, 10, 18, 9)))
        store.save(make_sample(QuantityType.DIETARY_WATER, 0.75, datetime(2026, 10, 18, 15)))
        store.save(make_sample(QuantityType.DIETARY_WATER, 0.5, datetime(2026, 10, 19, 9)))

        history = manager.fetch_water_intake_history(days=3)

        assert list(history) == [date(2026, 10, 17), date(2026, 10, 18), date(2026, 10, 19)]
        assert history[date(2026, 10, 17)] == 0.0
        assert history[date(2026, 10, 18)] == pytest.approx(1.0)
        assert history[date(2026, 10, 19)] == pytest.approx(0.5)

    def test_water_history_default_window(self, manager):
        history = manager.fetch_water_intake_history()
        assert len(history) == 30
        assert all(v == 0.0 for v in history.values())

    def test_workouts_last_week(self, manager, store, make_workout):
        recent = make_workout(datetime(2026, 10, 18, 7))
        older = make_workout(datetime(2026, 10, 14, 7))
        too_old = make_workout(datetime(2026, 10, 12, 7))
        for workout in (older, too_old, recent):
            store.save_workout(workout)

        assert manager.fetch_workouts_for_last_week() == [recent, older]

    def test_energy_for_workout_recorded(self, manager, make_workout):
        workout = make_workout(datetime(2026, 10, 18, 7), energy=350.0)
        assert manager.fetch_energy_for_workout(workout) == 350.0

    def test_energy_for_workout_from_samples(self, manager, seed, make_sample, make_workout):
        """Without recorded energy, active energy within the workout is summed."""
        start = datetime(2026, 10, 18, 7)
        workout = make_workout(start, minutes=30)
        seed(
            make_sample(QuantityType.ACTIVE_ENERGY, 100, start + timedelta(minutes=5)),
            make_sample(QuantityType.ACTIVE_ENERGY, 120, start + timedelta(minutes=20)),
            make_sample(QuantityType.ACTIVE_ENERGY, 500, start + timedelta(hours=2)),
        )

        assert manager.fetch_energy_for_workout(workout) == pytest.approx(220)


class TestDegradedReads:
    """Failures degrade to empty values instead of raising."""

    @pytest.fixture
    def failing_manager(self, settings):
        store = MagicMock(spec=InMemoryHealthStore)
        store.is_available.return_value = True
        error = StoreReadError("body_mass", "io error")
        store.latest_sample.side_effect = error
        store.cumulative_sum.side_effect = error
        store.samples.side_effect = error
        store.workouts.side_effect = error
        return HealthManager(store, settings=settings, clock=lambda: NOW)

    def test_latest_weight(self, failing_manager):
        assert failing_manager.fetch_latest_weight() is None

    def test_today_sums(self, failing_manager):
        assert failing_manager.fetch_today_water_intake() == 0.0
        assert failing_manager.fetch_today_exercise_time() == 0.0
        assert failing_manager.fetch_today_active_energy() == 0.0

    def test_histories(self, failing_manager):
        assert failing_manager.fetch_weight_history() == []
        assert failing_manager.fetch_water_intake_history() == {}
        assert failing_manager.fetch_workouts_for_last_week() == []

    def test_workout_energy(self, failing_manager):
        workout = Workout(start=NOW, end=NOW + timedelta(minutes=10))
        assert failing_manager.fetch_energy_for_workout(workout) == 0.0

    def test_unauthorized_reads(self, settings):
        manager = HealthManager(InMemoryHealthStore(), settings=settings, clock=lambda: NOW)
        assert manager.fetch_latest_weight() is None
        assert manager.fetch_today_water_intake() == 0.0

    def test_failure_is_logged(self, failing_manager):
        stream = io.StringIO()
        configure_logging(log_level="DEBUG", log_format="json", stream=stream)

        failing_manager.fetch_latest_weight()

        entry = _log_entries(stream)[-1]
        assert entry["event"] == "query_failed"
        assert entry["operation"] == "fetch_latest_weight"
        assert entry["error_type"] == "StoreReadError"


class TestWrites:
    """Tests for save operations."""

    def test_save_weight(self, manager, store):
        assert manager.save_weight(72.5) is True

        saved = store.latest_sample(QuantityType.BODY_MASS)
        assert saved.value == 72.5
        assert saved.unit is Unit.KILOGRAM
        assert saved.start == saved.end == NOW

    def test_save_weight_with_time(self, manager, store):
        when = datetime(2026, 10, 18, 7)
        manager.save_weight(73.0, when=when)
        assert store.latest_sample(QuantityType.BODY_MASS).end == when

    def test_save_water_intake(self, manager):
        assert manager.save_water_intake(0.25) is True
        assert manager.fetch_today_water_intake() == pytest.approx(0.25)

    @pytest.mark.parametrize("value", [0, -1.0, float("nan"), float("inf")])
    def test_rejects_invalid_values(self, manager, store, value):
        assert manager.save_weight(value) is False
        assert manager.save_water_intake(value) is False
        assert store.count() == 0

    def test_write_failure_is_false(self, settings):
        store = MagicMock(spec=InMemoryHealthStore)
        store.save.side_effect = StoreWriteError("body_mass", "disk full")
        manager = HealthManager(store, settings=settings, clock=lambda: NOW)

        assert manager.save_weight(72.5) is False

    def test_write_without_authorization(self, settings):
        manager = HealthManager(InMemoryHealthStore(), settings=settings, clock=lambda: NOW)
        assert manager.save_weight(72.5) is False

    def test_write_to_unavailable_store(self, settings):
        manager = HealthManager(InMemoryHealthStore(available=False), settings=settings)
        assert manager.save_water_intake(0.25) is False

    def test_success_is_logged(self, manager):
        stream = io.StringIO()
        configure_logging(log_level="DEBUG", log_format="json", stream=stream)

        manager.save_weight(72.5)

        entry = _log_entries(stream)[-1]
        assert entry["event"] == "sample_saved"
        assert entry["quantity_type"] == "body_mass"
        assert entry["unit"] == "kg"


class TestAsync:
    """Tests for the awaitable API."""

    @pytest.mark.asyncio
    async def test_async_round_trip(self, manager):
        assert await manager.request_authorization_async() is True
        assert await manager.save_weight_async(72.5) is True
        assert await manager.save_water_intake_async(0.25) is True

        latest = await manager.fetch_latest_weight_async()
        assert latest.value == 72.5
        assert await manager.fetch_today_water_intake_async() == pytest.approx(0.25)
        assert await manager.fetch_today_exercise_time_async() == 0.0
        assert await manager.fetch_today_active_energy_async() == 0.0
        assert len(await manager.fetch_weight_history_async()) == 1
        assert len(await manager.fetch_water_intake_history_async(days=7)) == 7
        assert await manager.fetch_workouts_for_last_week_async() == []

    @pytest.mark.asyncio
    async def test_async_workout_energy(self, manager, make_workout):
        workout = make_workout(NOW - timedelta(hours=2), energy=200.0)
        assert await manager.fetch_energy_for_workout_async(workout) == 200.0

    @pytest.mark.asyncio
    async def test_timeout_degrades(self, settings):
        """A slow store call times out and returns the empty value."""
        release = threading.Event()
        store = MagicMock(spec=InMemoryHealthStore)

        def slow_latest(quantity_type):
            release.wait(5)
            return None

        store.latest_sample.side_effect = slow_latest
        def slow_sum(*args):
            release.wait(5)
            return 0.0

        store.cumulative_sum.side_effect = slow_sum
        manager = HealthManager(store, settings=settings, request_timeout_s=0.05, clock=lambda: NOW)

        try:
            assert await manager.fetch_latest_weight_async() is None
            assert await manager.fetch_today_water_intake_async() == 0.0
        finally:
            release.set()
            manager.close()

    @pytest.mark.asyncio
    async def test_timeout_is_logged(self, settings):
        stream = io.StringIO()
        configure_logging(log_level="DEBUG", log_format="json", stream=stream)
        release = threading.Event()
        store = MagicMock(spec=InMemoryHealthStore)
        store.save.side_effect = lambda sample: release.wait(5)
        manager = HealthManager(store, settings=settings, request_timeout_s=0.05, clock=lambda: NOW)

        try:
            assert await manager.save_weight_async(72.5) is False
        finally:
            release.set()
            manager.close()

        timeouts = [e for e in _log_entries(stream) if e.get("error_type") == "StoreTimeoutError"]
        assert timeouts[0]["operation"] == "save_weight"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, settings):
        release = threading.Event()
        store = MagicMock(spec=InMemoryHealthStore)
        store.latest_sample.side_effect = lambda quantity_type: release.wait(5)
        manager = HealthManager(store, settings=settings, request_timeout_s=5, clock=lambda: NOW)

        task = asyncio.create_task(manager.fetch_latest_weight_async())
        await asyncio.sleep(0.05)
        task.cancel()

        try:
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            release.set()
            manager.close()


class TestLifecycle:
    """Tests for executor lifecycle."""

    def test_executor_created_lazily(self, manager):
        assert manager._executor is None
        executor = manager._get_executor()
        assert manager._get_executor() is executor

    def test_close(self, manager):
        manager._get_executor()
        manager.close()
        assert manager._executor is None

    def test_settings_overrides(self, store, settings):
        manager = HealthManager(store, settings=settings, request_timeout_s=1.5, max_workers=2)
        assert manager.request_timeout_s == 1.5
        assert manager._max_workers == 2
        assert manager.settings is settings
