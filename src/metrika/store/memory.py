"""
In-memory health store.

Holds samples and workouts in lists guarded by a lock so the async
``HealthManager`` API can call it from worker threads.
"""

import threading
from datetime import datetime
from typing import Iterable, Optional

from ..exceptions import AuthorizationDeniedError, HealthDataUnavailableError
from ..models.enums import QuantityType
from ..models.samples import QuantitySample, Workout


class InMemoryHealthStore:
    """
    Memory-backed ``HealthStore`` implementation.

    Examples:
        >>> store = InMemoryHealthStore()
        >>> store.request_authorization([QuantityType.BODY_MASS], [QuantityType.BODY_MASS])
        True
        >>> store.save(QuantitySample.at(QuantityType.BODY_MASS, 72.5, datetime.now()))
        True
    """

    def __init__(
        self,
        available: bool = True,
        grant_authorization: bool = True,
        samples: Optional[Iterable[QuantitySample]] = None,
        workouts: Optional[Iterable[Workout]] = None,
    ):
        """
        Args:
            available: Whether the store reports health data as available.
            grant_authorization: Whether authorization requests are granted.
            samples: Initial samples.
            workouts: Initial workouts.
        """
        self._available = available
        self._grant = grant_authorization
        self._lock = threading.RLock()
        self._samples: list[QuantitySample] = list(samples or [])
        self._workouts: list[Workout] = list(workouts or [])
        self._readable: set[QuantityType] = set()
        self._writable: set[QuantityType] = set()
        self._workouts_readable = False

    # === HealthStore Interface Implementation ===

    def is_available(self) -> bool:
        return self._available

    def request_authorization(
        self,
        read: Iterable[QuantityType],
        write: Iterable[QuantityType],
        workouts: bool = True,
    ) -> bool:
        if not self._available or not self._grant:
            return False
        with self._lock:
            self._readable.update(read)
            self._writable.update(write)
            self._workouts_readable = self._workouts_readable or workouts
        return True

    def latest_sample(self, quantity_type: QuantityType) -> Optional[QuantitySample]:
        self._check_read(quantity_type)
        with self._lock:
            matching = [s for s in self._samples if s.quantity_type is quantity_type]
        if not matching:
            return None
        return max(matching, key=lambda s: s.end)

    def cumulative_sum(
        self,
        quantity_type: QuantityType,
        start: datetime,
        end: datetime,
    ) -> float:
        return sum(
            s.canonical_value
            for s in self.samples(quantity_type, start, end, ascending=None)
        )

    def samples(
        self,
        quantity_type: QuantityType,
        start: datetime,
        end: datetime,
        ascending: Optional[bool] = True,
    ) -> list[QuantitySample]:
        self._check_read(quantity_type)
        with self._lock:
            result = [
                s for s in self._samples
                if s.quantity_type is quantity_type and start <= s.start <= end
            ]
        if ascending is not None:
            result.sort(key=lambda s: s.start, reverse=not ascending)
        return result

    def save(self, sample: QuantitySample) -> bool:
        self._check_write(sample.quantity_type)
        with self._lock:
            self._samples.append(sample)
            try:
                self._persist()
            except Exception:
                self._samples.pop()
                raise
        return True

    def workouts(self, start: datetime, end: datetime) -> list[Workout]:
        self._check_available()
        if not self._workouts_readable:
            raise AuthorizationDeniedError("workout", "read")
        with self._lock:
            result = [w for w in self._workouts if start <= w.start <= end]
        result.sort(key=lambda w: w.start, reverse=True)
        return result

    def save_workout(self, workout: Workout) -> bool:
        self._check_available()
        with self._lock:
            self._workouts.append(workout)
            try:
                self._persist()
            except Exception:
                self._workouts.pop()
                raise
        return True

    # === Helpers ===

    def count(self) -> int:
        """Number of stored samples."""
        with self._lock:
            return len(self._samples)

    def _persist(self) -> None:
        """Hook for subclasses that write through to durable storage."""
        pass

    def _check_available(self) -> None:
        if not self._available:
            raise HealthDataUnavailableError()

    def _check_read(self, quantity_type: QuantityType) -> None:
        self._check_available()
        if quantity_type not in self._readable:
            raise AuthorizationDeniedError(quantity_type.value, "read")

    def _check_write(self, quantity_type: QuantityType) -> None:
        self._check_available()
        if quantity_type not in self._writable:
            raise AuthorizationDeniedError(quantity_type.value, "write")
