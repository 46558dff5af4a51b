"""Health data manager that wraps a ``HealthStore`` for the app's screens."""

import asyncio
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from .config import MetrikaSettings, get_settings
from .exceptions import (
    HealthDataUnavailableError,
    HealthStoreError,
    StoreTimeoutError,
)
from .logging import HealthLogger
from .models.enums import QuantityType
from .models.samples import QuantitySample, Workout
from .normalizers.datetime import DateTimeNormalizer
from .normalizers.numbers import NumberNormalizer
from .store.interface import HealthStore


logger = HealthLogger(__name__)

T = TypeVar("T")


class HealthManager:
    """
    Reads and writes body weight, water intake and activity data.

    Every operation is single-shot. Failures never raise: an unavailable
    store, a denied authorization or a failed query degrade to an empty
    value (None, 0.0, empty list or dict) and a failed write to False. Each
    failure is logged.

    Every operation also has an ``*_async`` variant that runs the call in a
    worker thread with a timeout. Cancelling the awaiting task cancels the
    wait; a timeout degrades to the same empty value.
    """

    READ_TYPES = (
        QuantityType.BODY_MASS,
        QuantityType.DIETARY_WATER,
        QuantityType.ACTIVE_ENERGY,
        QuantityType.EXERCISE_TIME,
    )
    WRITE_TYPES = (
        QuantityType.BODY_MASS,
        QuantityType.DIETARY_WATER,
    )

    def __init__(
        self,
        store: HealthStore,
        settings: Optional[MetrikaSettings] = None,
        request_timeout_s: Optional[float] = None,
        max_workers: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize manager.

        Args:
            store: Health data store to delegate to.
            settings: Optional MetrikaSettings instance for Dependency Injection.
            request_timeout_s: Timeout for async calls, overrides settings.
            max_workers: Worker threads for async calls, overrides settings.
            clock: Returns "now"; defaults to ``datetime.now``.
        """
        self._settings = settings or get_settings()
        self.store = store
        self.request_timeout_s = (
            request_timeout_s if request_timeout_s is not None
            else self._settings.request_timeout_s
        )
        self._max_workers = (
            max_workers if max_workers is not None
            else self._settings.max_workers
        )
        self._clock = clock or datetime.now
        self._executor: Optional[ThreadPoolExecutor] = None
        self._unavailable_reported = False

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @property
    def settings(self) -> MetrikaSettings:
        return self._settings

    def now(self) -> datetime:
        return self._clock()

    def _report_unavailable(self, reason: str) -> None:
        """Log the unavailable store once per manager."""
        if not self._unavailable_reported:
            logger.store_unavailable(reason=reason)
            self._unavailable_reported = True

    def _query(self, operation: str, call: Callable[[], T], default: T) -> T:
        """Run a store call, degrading store errors to ``default``."""
        try:
            return call()
        except HealthDataUnavailableError as e:
            self._report_unavailable(e.reason)
            return default
        except HealthStoreError as e:
            logger.query_failed(
                operation=operation,
                error=e.message,
                error_type=type(e).__name__,
            )
            return default

    def _save(self, quantity_type: QuantityType, value: float, when: Optional[datetime]) -> bool:
        """Validate and persist one sample, reporting success as a bool."""
        if not NumberNormalizer.is_positive_finite(value):
            logger.save_failed(
                quantity_type=quantity_type.value,
                error=f"value must be a positive number (got {value})",
            )
            return False

        try:
            sample = QuantitySample.at(quantity_type, value, when or self.now())
        except PydanticValidationError as e:
            logger.save_failed(quantity_type=quantity_type.value, error=str(e))
            return False

        try:
            saved = self.store.save(sample)
        except HealthDataUnavailableError as e:
            self._report_unavailable(e.reason)
            return False
        except HealthStoreError as e:
            logger.save_failed(
                quantity_type=quantity_type.value,
                error=e.message,
                error_type=type(e).__name__,
            )
            return False

        if saved:
            logger.sample_saved(
                quantity_type=quantity_type.value,
                value=value,
                unit=sample.unit.value,
                sample_id=sample.id,
            )
        else:
            logger.save_failed(quantity_type=quantity_type.value, error="store rejected sample")
        return saved

    def _today_sum(self, quantity_type: QuantityType, operation: str) -> float:
        start, end = DateTimeNormalizer.today_range(self.now())
        return self._query(
            operation,
            lambda: self.store.cumulative_sum(quantity_type, start, end),
            0.0,
        )

    # =========================================================================
    # Authorization
    # =========================================================================

    def request_authorization(self) -> bool:
        """Request read/write access; False when unavailable or denied."""
        if not self.store.is_available():
            self._report_unavailable("health data store is not available")
            return False

        granted = self._query(
            "request_authorization",
            lambda: self.store.request_authorization(self.READ_TYPES, self.WRITE_TYPES),
            False,
        )
        logger.authorization_requested(granted=granted)
        return granted

    # =========================================================================
    # Reads
    # =========================================================================

    def fetch_latest_weight(self) -> Optional[QuantitySample]:
        """Most recent body mass sample, or None."""
        return self._query(
            "fetch_latest_weight",
            lambda: self.store.latest_sample(QuantityType.BODY_MASS),
            None,
        )

    def fetch_today_water_intake(self) -> float:
        """Liters of water logged since the start of today."""
        return self._today_sum(QuantityType.DIETARY_WATER, "fetch_today_water_intake")

    def fetch_today_exercise_time(self) -> float:
        """Exercise minutes logged since the start of today."""
        return self._today_sum(QuantityType.EXERCISE_TIME, "fetch_today_exercise_time")

    def fetch_today_active_energy(self) -> float:
        """Active kilocalories burned since the start of today."""
        return self._today_sum(QuantityType.ACTIVE_ENERGY, "fetch_today_active_energy")

    def fetch_weight_history(self, days: Optional[int] = None) -> list[QuantitySample]:
        """Body mass samples of the last ``days`` days, oldest first."""
        start, end = DateTimeNormalizer.last_days_range(
            self._settings.history_days if days is None else days, self.now()
        )
        return self._query(
            "fetch_weight_history",
            lambda: self.store.samples(QuantityType.BODY_MASS, start, end, ascending=True),
            [],
        )

    def fetch_water_intake_history(self, days: Optional[int] = None) -> dict[date, float]:
        """
        Daily water totals (liters) of the last ``days`` days.

        Every day of the window is present; days without samples are 0.0.
        A failed query yields an empty dict.
        """
        start, end = DateTimeNormalizer.last_days_range(
            self._settings.history_days if days is None else days, self.now()
        )
        samples = self._query(
            "fetch_water_intake_history",
            lambda: self.store.samples(QuantityType.DIETARY_WATER, start, end, ascending=True),
            None,
        )
        if samples is None:
            return {}

        totals: dict[date, float] = defaultdict(float)
        for sample in samples:
            totals[sample.start.date()] += sample.canonical_value
        return {
            day: totals.get(day, 0.0)
            for day in DateTimeNormalizer.days_between(start.date(), end.date())
        }

    def fetch_workouts_for_last_week(self, days: Optional[int] = None) -> list[Workout]:
        """Workouts of the last ``days`` days (default one week), newest first."""
        start, end = DateTimeNormalizer.last_days_range(
            self._settings.workout_days if days is None else days, self.now()
        )
        return self._query(
            "fetch_workouts",
            lambda: self.store.workouts(start, end),
            [],
        )

    def fetch_energy_for_workout(self, workout: Workout) -> float:
        """
        Kilocalories burned during a workout.

        Uses the energy recorded on the workout when present, otherwise sums
        active energy samples within the workout's interval.
        """
        if workout.total_energy_kcal is not None:
            return workout.total_energy_kcal
        return self._query(
            "fetch_energy_for_workout",
            lambda: self.store.cumulative_sum(
                QuantityType.ACTIVE_ENERGY, workout.start, workout.end
            ),
            0.0,
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def save_weight(self, weight_kg: float, when: Optional[datetime] = None) -> bool:
        """Save a body mass sample in kilograms."""
        return self._save(QuantityType.BODY_MASS, weight_kg, when)

    def save_water_intake(self, liters: float, when: Optional[datetime] = None) -> bool:
        """Save a water intake sample in liters."""
        return self._save(QuantityType.DIETARY_WATER, liters, when)

    # =========================================================================
    # Async Methods
    # =========================================================================

    def _get_executor(self) -> ThreadPoolExecutor:
        """Lazy initialization of thread pool executor."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers)
        return self._executor

    def close(self) -> None:
        """Shut down the worker pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def __del__(self):
        if getattr(self, "_executor", None) is not None:
            self._executor.shutdown(wait=False)

    async def _run_async(self, operation: str, call: Callable[[], T], default: T) -> T:
        """Run ``call`` in the worker pool with the configured timeout."""
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._get_executor(), call)
        try:
            return await asyncio.wait_for(future, timeout=self.request_timeout_s)
        except asyncio.TimeoutError:
            error = StoreTimeoutError(operation, self.request_timeout_s)
            logger.query_failed(
                operation=operation,
                error=error.message,
                error_type=type(error).__name__,
            )
            return default

    async def request_authorization_async(self) -> bool:
        return await self._run_async("request_authorization", self.request_authorization, False)

    async def fetch_latest_weight_async(self) -> Optional[QuantitySample]:
        return await self._run_async("fetch_latest_weight", self.fetch_latest_weight, None)

    async def fetch_today_water_intake_async(self) -> float:
        return await self._run_async(
            "fetch_today_water_intake", self.fetch_today_water_intake, 0.0
        )

    async def fetch_today_exercise_time_async(self) -> float:
        return await self._run_async(
            "fetch_today_exercise_time", self.fetch_today_exercise_time, 0.0
        )

    async def fetch_today_active_energy_async(self) -> float:
        return await self._run_async(
            "fetch_today_active_energy", self.fetch_today_active_energy, 0.0
        )

    async def fetch_weight_history_async(self, days: Optional[int] = None) -> list[QuantitySample]:
        return await self._run_async(
            "fetch_weight_history", lambda: self.fetch_weight_history(days), []
        )

    async def fetch_water_intake_history_async(
        self, days: Optional[int] = None
    ) -> dict[date, float]:
        return await self._run_async(
            "fetch_water_intake_history", lambda: self.fetch_water_intake_history(days), {}
        )

    async def fetch_workouts_for_last_week_async(
        self, days: Optional[int] = None
    ) -> list[Workout]:
        return await self._run_async(
            "fetch_workouts", lambda: self.fetch_workouts_for_last_week(days), []
        )

    async def fetch_energy_for_workout_async(self, workout: Workout) -> float:
        return await self._run_async(
            "fetch_energy_for_workout", lambda: self.fetch_energy_for_workout(workout), 0.0
        )

    async def save_weight_async(self, weight_kg: float, when: Optional[datetime] = None) -> bool:
        return await self._run_async(
            "save_weight", lambda: self.save_weight(weight_kg, when), False
        )

    async def save_water_intake_async(
        self, liters: float, when: Optional[datetime] = None
    ) -> bool:
        return await self._run_async(
            "save_water_intake", lambda: self.save_water_intake(liters, when), False
        )
