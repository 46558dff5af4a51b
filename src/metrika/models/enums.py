"""Enumeration types for health data categories, units and workouts."""

from decimal import Decimal
from enum import Enum


class Unit(Enum):
    """Units of measure used by stored samples."""

    KILOGRAM = "kg"
    GRAM = "g"
    LITER = "L"
    MILLILITER = "mL"
    KILOCALORIE = "kcal"
    MINUTE = "min"

    @property
    def dimension(self) -> str:
        """Physical dimension shared by convertible units."""
        return _DIMENSIONS[self]

    def convert(self, value: Decimal, target: "Unit") -> Decimal:
        """Convert ``value`` from this unit into ``target``.

        Raises:
            ValueError: If the units measure different dimensions.
        """
        if self.dimension != target.dimension:
            raise ValueError(f"Cannot convert {self.value} to {target.value}")
        return Decimal(str(value)) * _FACTORS[self] / _FACTORS[target]


_DIMENSIONS = {
    Unit.KILOGRAM: "mass",
    Unit.GRAM: "mass",
    Unit.LITER: "volume",
    Unit.MILLILITER: "volume",
    Unit.KILOCALORIE: "energy",
    Unit.MINUTE: "time",
}

# Factor to the canonical unit of each dimension
_FACTORS = {
    Unit.KILOGRAM: Decimal("1"),
    Unit.GRAM: Decimal("0.001"),
    Unit.LITER: Decimal("1"),
    Unit.MILLILITER: Decimal("0.001"),
    Unit.KILOCALORIE: Decimal("1"),
    Unit.MINUTE: Decimal("1"),
}


class QuantityType(Enum):
    """Health data categories handled by the app."""

    BODY_MASS = "body_mass"
    DIETARY_WATER = "dietary_water"
    ACTIVE_ENERGY = "active_energy"
    EXERCISE_TIME = "exercise_time"

    @property
    def unit(self) -> Unit:
        """Canonical unit for values of this type."""
        return {
            QuantityType.BODY_MASS: Unit.KILOGRAM,
            QuantityType.DIETARY_WATER: Unit.LITER,
            QuantityType.ACTIVE_ENERGY: Unit.KILOCALORIE,
            QuantityType.EXERCISE_TIME: Unit.MINUTE,
        }[self]

    @property
    def is_cumulative(self) -> bool:
        """Whether samples of this type are summed over a period."""
        return self is not QuantityType.BODY_MASS


class WorkoutActivityType(Enum):
    """Workout activity kinds with display label and icon."""

    RUNNING = "running"
    WALKING = "walking"
    CYCLING = "cycling"
    STRENGTH_TRAINING = "strength_training"
    HIIT = "hiit"
    SWIMMING = "swimming"
    YOGA = "yoga"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _ACTIVITY_LABELS[self]

    @property
    def icon(self) -> str:
        return _ACTIVITY_ICONS[self]

    @classmethod
    def from_text(cls, text: str) -> "WorkoutActivityType":
        """Match an activity type, falling back to OTHER."""
        key = text.strip().lower().replace("-", "_").replace(" ", "_")
        for activity in cls:
            if activity.value == key:
                return activity
        return cls.OTHER


_ACTIVITY_LABELS = {
    WorkoutActivityType.RUNNING: "Corrida",
    WorkoutActivityType.WALKING: "Caminhada",
    WorkoutActivityType.CYCLING: "Ciclismo",
    WorkoutActivityType.STRENGTH_TRAINING: "Musculação",
    WorkoutActivityType.HIIT: "HIIT",
    WorkoutActivityType.SWIMMING: "Natação",
    WorkoutActivityType.YOGA: "Yoga",
    WorkoutActivityType.OTHER: "Outro Treino",
}

_ACTIVITY_ICONS = {
    WorkoutActivityType.RUNNING: "figure.run",
    WorkoutActivityType.WALKING: "figure.walk",
    WorkoutActivityType.CYCLING: "figure.outdoor.cycle",
    WorkoutActivityType.STRENGTH_TRAINING: "figure.strengthtraining.traditional",
    WorkoutActivityType.HIIT: "metronome.fill",
    WorkoutActivityType.SWIMMING: "figure.pool.swim",
    WorkoutActivityType.YOGA: "figure.yoga",
    WorkoutActivityType.OTHER: "figure.mixed.cardio",
}
