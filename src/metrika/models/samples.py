"""Pydantic models for records held by the health data store."""

import datetime
import math
import uuid
from typing import Optional, Self

from pydantic import BaseModel, Field, model_validator

from .enums import QuantityType, Unit, WorkoutActivityType


class QuantitySample(BaseModel):
    """A single measured value of one quantity type over a time interval."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    quantity_type: QuantityType
    value: float
    unit: Unit
    start: datetime.datetime
    end: datetime.datetime

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_sample(self) -> Self:
        """Reject negative values, inverted intervals and foreign units."""
        if not math.isfinite(self.value) or self.value < 0:
            raise ValueError(f"Sample value must be a finite number >= 0 (got {self.value})")
        if self.end < self.start:
            raise ValueError("Sample end must not precede its start")
        if self.unit.dimension != self.quantity_type.unit.dimension:
            raise ValueError(
                f"Unit '{self.unit.value}' is not valid for {self.quantity_type.value}"
            )
        return self

    @classmethod
    def at(
        cls,
        quantity_type: QuantityType,
        value: float,
        when: datetime.datetime,
        unit: Optional[Unit] = None,
    ) -> "QuantitySample":
        """Create an instantaneous sample (start == end)."""
        return cls(
            quantity_type=quantity_type,
            value=value,
            unit=unit or quantity_type.unit,
            start=when,
            end=when,
        )

    def value_in(self, unit: Unit) -> float:
        """Return the value converted into ``unit``."""
        return float(self.unit.convert(self.value, unit))

    @property
    def canonical_value(self) -> float:
        """Value expressed in the quantity type's canonical unit."""
        return self.value_in(self.quantity_type.unit)


class Workout(BaseModel):
    """A recorded workout session."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    activity_type: WorkoutActivityType = WorkoutActivityType.OTHER
    start: datetime.datetime
    end: datetime.datetime
    total_energy_kcal: Optional[float] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_interval(self) -> Self:
        if self.end < self.start:
            raise ValueError("Workout end must not precede its start")
        if self.total_energy_kcal is not None and self.total_energy_kcal < 0:
            raise ValueError("Workout energy must be >= 0")
        return self

    @property
    def duration(self) -> datetime.timedelta:
        """Elapsed time between start and end."""
        return self.end - self.start
