"""Data models for health samples, workouts and summary output."""

from .enums import QuantityType, Unit, WorkoutActivityType
from .weight import Weight
from .samples import QuantitySample, Workout
from .summary import (
    WeightCard,
    HydrationCard,
    WeightPoint,
    WaterDataPoint,
    WorkoutRow,
    ActivitySummary,
    HealthReport,
)

__all__ = [
    "QuantityType",
    "Unit",
    "WorkoutActivityType",
    "Weight",
    "QuantitySample",
    "Workout",
    "WeightCard",
    "HydrationCard",
    "WeightPoint",
    "WaterDataPoint",
    "WorkoutRow",
    "ActivitySummary",
    "HealthReport",
]
