"""Pydantic models for summary cards and chart series."""

import datetime
from typing import ClassVar, Optional, Self

from pydantic import BaseModel, Field, computed_field, model_validator


class WeightCard(BaseModel):
    """Latest recorded weight as shown on the summary card."""

    PLACEHOLDER_VALUE: ClassVar[str] = "---"
    NO_RECORD_TEXT: ClassVar[str] = "Nenhum registo encontrado"

    value_text: str = PLACEHOLDER_VALUE
    date_text: str = NO_RECORD_TEXT
    value_kg: Optional[float] = None
    recorded_at: Optional[datetime.datetime] = None

    @computed_field
    @property
    def has_record(self) -> bool:
        return self.value_kg is not None


class HydrationCard(BaseModel):
    """Today's water intake against the daily goal."""

    consumed_liters: float = 0.0
    goal_liters: float = Field(default=2.0, gt=0.0)

    @computed_field
    @property
    def progress(self) -> float:
        """Fraction of the goal reached, clamped to [0, 1]."""
        return max(0.0, min(1.0, self.consumed_liters / self.goal_liters))

    @computed_field
    @property
    def label(self) -> str:
        """Progress label, e.g. '1.5L de 2L'."""
        return f"{self.consumed_liters:.1f}L de {self.goal_liters:.0f}L"

    @computed_field
    @property
    def consumed_text(self) -> str:
        return f"{self.consumed_liters:.2f} L"


class WeightPoint(BaseModel):
    """One point of the weight chart."""

    recorded_at: datetime.datetime
    value_kg: float

    @property
    def day(self) -> datetime.date:
        return self.recorded_at.date()


class WaterDataPoint(BaseModel):
    """Total water intake for one calendar day."""

    date: datetime.date
    total_liters: float = 0.0


class WorkoutRow(BaseModel):
    """A workout as listed in the weekly summary."""

    workout_id: str
    label: str
    icon: str
    date: datetime.date
    duration_text: str
    calories: Optional[float] = None

    @computed_field
    @property
    def calories_text(self) -> Optional[str]:
        if self.calories is None:
            return None
        return f"{int(self.calories)} kcal"


class ActivitySummary(BaseModel):
    """Today's exercise minutes and active calories plus recent workouts."""

    EMPTY_TEXT: ClassVar[str] = "Nenhuma atividade registrada na última semana."

    exercise_minutes: float = 0.0
    active_calories: float = 0.0
    workouts: list[WorkoutRow] = Field(default_factory=list)

    @computed_field
    @property
    def minutes_text(self) -> str:
        return str(int(self.exercise_minutes))

    @computed_field
    @property
    def calories_text(self) -> str:
        return str(int(self.active_calories))

    @property
    def is_empty(self) -> bool:
        return not self.workouts


class HealthReport(BaseModel):
    """Weight and water series over a reporting window."""

    start_date: datetime.date
    end_date: datetime.date
    weight_series: list[WeightPoint] = Field(default_factory=list)
    water_series: list[WaterDataPoint] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_window(self) -> Self:
        if self.end_date < self.start_date:
            raise ValueError("Report end_date must not precede start_date")
        return self

    @computed_field
    @property
    def has_weight_data(self) -> bool:
        return bool(self.weight_series)

    @computed_field
    @property
    def has_water_data(self) -> bool:
        """False when there are no points or every day is zero."""
        return any(p.total_liters > 0 for p in self.water_series)

    def to_flat_rows(self) -> list[dict]:
        """One row per day for CSV export."""
        weights: dict[datetime.date, float] = {}
        for point in self.weight_series:
            # last reading of the day wins
            weights[point.day] = point.value_kg

        rows = []
        for point in self.water_series:
            rows.append({
                "date": point.date.isoformat(),
                "weight_kg": weights.pop(point.date, None),
                "water_liters": point.total_liters,
            })
        for day, value in sorted(weights.items()):
            rows.append({
                "date": day.isoformat(),
                "weight_kg": value,
                "water_liters": None,
            })
        rows.sort(key=lambda r: r["date"])
        return rows
