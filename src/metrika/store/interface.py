"""
Health data store interface.

The store is the external collaborator that owns every persisted sample and
workout. Each call is single-shot: it returns a value, an empty value, or
raises a ``HealthStoreError``. There is no pagination or streaming.
"""

from abc import abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Protocol, runtime_checkable

from ..models.enums import QuantityType
from ..models.samples import QuantitySample, Workout


@runtime_checkable
class HealthStore(Protocol):
    """
    Health data store protocol.

    Implementations raise ``HealthDataUnavailableError`` from every query when
    ``is_available()`` is False, and ``AuthorizationDeniedError`` when a
    category was not authorized for the requested access.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether health data can be used on this device."""
        ...

    @abstractmethod
    def request_authorization(
        self,
        read: Iterable[QuantityType],
        write: Iterable[QuantityType],
    ) -> bool:
        """
        Request read/write access to the given categories.

        Returns:
            True if access was granted, False otherwise (including when the
            store is unavailable).
        """
        ...

    @abstractmethod
    def latest_sample(self, quantity_type: QuantityType) -> Optional[QuantitySample]:
        """Most recent sample of a category by end time, or None."""
        ...

    @abstractmethod
    def cumulative_sum(
        self,
        quantity_type: QuantityType,
        start: datetime,
        end: datetime,
    ) -> float:
        """Sum of samples starting within [start, end], in the canonical unit."""
        ...

    @abstractmethod
    def samples(
        self,
        quantity_type: QuantityType,
        start: datetime,
        end: datetime,
        ascending: Optional[bool] = True,
    ) -> list[QuantitySample]:
        """
        All samples starting within [start, end].

        Args:
            ascending: Sort by start time ascending (True), descending (False)
                or keep insertion order (None).
        """
        ...

    @abstractmethod
    def save(self, sample: QuantitySample) -> bool:
        """Persist one sample. Returns True on success."""
        ...

    @abstractmethod
    def workouts(self, start: datetime, end: datetime) -> list[Workout]:
        """Workouts starting within [start, end], most recent first."""
        ...

    @abstractmethod
    def save_workout(self, workout: Workout) -> bool:
        """Persist one workout. Returns True on success."""
        ...
