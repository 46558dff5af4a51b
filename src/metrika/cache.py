"""
Read-through cache of the values shown on the summary screen.

Values are keyed by data category. A category is loaded from the
``HealthManager`` on first access and kept until it is invalidated or
refreshed. Writes through ``record_weight`` / ``record_water`` refresh the
affected category only when the save succeeds.
"""

import threading
from datetime import date
from typing import Any, Callable, Iterable, Optional

from .health import HealthManager
from .logging import HealthLogger
from .models.enums import QuantityType
from .models.samples import QuantitySample

logger = HealthLogger(__name__)

_MISSING = object()


class HealthDataCache:
    """
    Per-category cache in front of a ``HealthManager``.

    Daily totals are tied to the day they were loaded and are reloaded once
    the manager's clock moves to another day.

    Examples:
        >>> cache = HealthDataCache(HealthManager(InMemoryHealthStore()))
        >>> cache.record_water(0.25)
        True
        >>> cache.today_water()
        0.25
    """

    CATEGORIES = (
        QuantityType.BODY_MASS,
        QuantityType.DIETARY_WATER,
        QuantityType.EXERCISE_TIME,
        QuantityType.ACTIVE_ENERGY,
    )

    def __init__(self, manager: HealthManager):
        self.manager = manager
        self._lock = threading.RLock()
        self._values: dict[QuantityType, Any] = {}
        self._loaded_on: dict[QuantityType, date] = {}
        self._loaders: dict[QuantityType, Callable[[], Any]] = {
            QuantityType.BODY_MASS: manager.fetch_latest_weight,
            QuantityType.DIETARY_WATER: manager.fetch_today_water_intake,
            QuantityType.EXERCISE_TIME: manager.fetch_today_exercise_time,
            QuantityType.ACTIVE_ENERGY: manager.fetch_today_active_energy,
        }

    def _get(self, category: QuantityType) -> Any:
        today = self.manager.now().date()
        with self._lock:
            value = self._values.get(category, _MISSING)
            stale = category.is_cumulative and self._loaded_on.get(category) != today
            if value is _MISSING or stale:
                value = self._load(category, today)
            return value

    def _load(self, category: QuantityType, today: date) -> Any:
        value = self._loaders[category]()
        self._values[category] = value
        self._loaded_on[category] = today
        return value

    # =========================================================================
    # Cached Reads
    # =========================================================================

    def latest_weight(self) -> Optional[QuantitySample]:
        return self._get(QuantityType.BODY_MASS)

    def today_water(self) -> float:
        return self._get(QuantityType.DIETARY_WATER)

    def today_exercise(self) -> float:
        return self._get(QuantityType.EXERCISE_TIME)

    def today_energy(self) -> float:
        return self._get(QuantityType.ACTIVE_ENERGY)

    def is_cached(self, category: QuantityType) -> bool:
        with self._lock:
            return category in self._values

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate(self, category: Optional[QuantityType] = None) -> None:
        """Drop one category, or every category when none is given."""
        with self._lock:
            if category is None:
                self._values.clear()
                self._loaded_on.clear()
            else:
                self._values.pop(category, None)
                self._loaded_on.pop(category, None)

    def refresh(self, category: Optional[QuantityType] = None) -> None:
        """Reload one category, or every category when none is given."""
        categories: Iterable[QuantityType] = (
            self.CATEGORIES if category is None else (category,)
        )
        today = self.manager.now().date()
        with self._lock:
            for item in categories:
                self._load(item, today)
        logger.cache_refreshed(categories=[c.value for c in categories])

    # =========================================================================
    # Writes
    # =========================================================================

    def record_weight(self, weight_kg: float) -> bool:
        """Save a weight and refresh the latest weight on success."""
        saved = self.manager.save_weight(weight_kg)
        if saved:
            self.refresh(QuantityType.BODY_MASS)
        return saved

    def record_water(self, liters: float) -> bool:
        """Save a water intake and refresh today's total on success."""
        saved = self.manager.save_water_intake(liters)
        if saved:
            self.refresh(QuantityType.DIETARY_WATER)
        return saved
