"""
Summary cards, chart series and activity summaries.

The ``build_*`` functions turn fetched values into display models and never
touch the store. ``ReportBuilder`` fetches through a ``HealthManager`` and
assembles them.
"""

from datetime import date
from typing import Mapping, Optional, Sequence

from .health import HealthManager
from .models.enums import Unit
from .models.samples import QuantitySample, Workout
from .models.summary import (
    ActivitySummary,
    HealthReport,
    HydrationCard,
    WaterDataPoint,
    WeightCard,
    WeightPoint,
    WorkoutRow,
)
from .models.weight import Weight
from .normalizers.datetime import DateTimeNormalizer
from .normalizers.numbers import NumberNormalizer

format_duration = DateTimeNormalizer.format_duration

WATER_PRESETS_ML = NumberNormalizer.WATER_PRESETS_ML


def build_weight_card(sample: Optional[QuantitySample]) -> WeightCard:
    """Latest-weight card; placeholder text when there is no sample."""
    if sample is None:
        return WeightCard()
    kg = sample.value_in(Unit.KILOGRAM)
    return WeightCard(
        value_text=Weight.from_kg(kg).formatted(),
        date_text=DateTimeNormalizer.format_timestamp(sample.end),
        value_kg=kg,
        recorded_at=sample.end,
    )


def build_hydration_card(liters: float, goal_liters: float = 2.0) -> HydrationCard:
    return HydrationCard(consumed_liters=max(0.0, liters), goal_liters=goal_liters)


def build_water_series(daily_totals: Mapping[date, float]) -> list[WaterDataPoint]:
    """Daily water points sorted by date."""
    return [
        WaterDataPoint(date=day, total_liters=total)
        for day, total in sorted(daily_totals.items())
    ]


def has_water_data(series: Sequence[WaterDataPoint]) -> bool:
    """False when the series is empty or every day is zero."""
    return any(point.total_liters > 0 for point in series)


def build_weight_series(samples: Sequence[QuantitySample]) -> list[WeightPoint]:
    """Weight points in kilograms, oldest first."""
    points = [
        WeightPoint(recorded_at=s.start, value_kg=s.value_in(Unit.KILOGRAM))
        for s in samples
    ]
    points.sort(key=lambda p: p.recorded_at)
    return points


def build_workout_row(workout: Workout, calories: Optional[float] = None) -> WorkoutRow:
    activity = workout.activity_type
    return WorkoutRow(
        workout_id=workout.id,
        label=activity.label,
        icon=activity.icon,
        date=workout.start.date(),
        duration_text=format_duration(workout.duration),
        calories=calories,
    )


def build_activity_summary(
    exercise_minutes: float,
    active_calories: float,
    workouts: Sequence[Workout],
    calories_by_workout: Optional[Mapping[str, float]] = None,
) -> ActivitySummary:
    """
    Activity summary for today's rings and the recent workout list.

    ``calories_by_workout`` maps workout id to burned kcal; workouts missing
    from it fall back to their recorded energy.
    """
    calories_by_workout = calories_by_workout or {}
    rows = [
        build_workout_row(w, calories_by_workout.get(w.id, w.total_energy_kcal))
        for w in workouts
    ]
    return ActivitySummary(
        exercise_minutes=max(0.0, exercise_minutes),
        active_calories=max(0.0, active_calories),
        workouts=rows,
    )


class ReportBuilder:
    """Fetches values through a ``HealthManager`` and builds display models."""

    def __init__(self, manager: HealthManager, water_goal_liters: Optional[float] = None):
        self.manager = manager
        self.water_goal_liters = (
            water_goal_liters if water_goal_liters is not None
            else manager.settings.water_goal_liters
        )

    def weight_card(self) -> WeightCard:
        return build_weight_card(self.manager.fetch_latest_weight())

    def hydration_card(self) -> HydrationCard:
        return build_hydration_card(
            self.manager.fetch_today_water_intake(), self.water_goal_liters
        )

    def health_report(self, days: Optional[int] = None) -> HealthReport:
        """Weight and water series over the last ``days`` days."""
        if days is None:
            days = self.manager.settings.history_days
        start, end = DateTimeNormalizer.last_days_range(days, self.manager.now())
        return HealthReport(
            start_date=start.date(),
            end_date=end.date(),
            weight_series=build_weight_series(self.manager.fetch_weight_history(days)),
            water_series=build_water_series(self.manager.fetch_water_intake_history(days)),
        )

    def activity_summary(self, days: Optional[int] = None) -> ActivitySummary:
        workouts = self.manager.fetch_workouts_for_last_week(days)
        calories = {w.id: self.manager.fetch_energy_for_workout(w) for w in workouts}
        return build_activity_summary(
            self.manager.fetch_today_exercise_time(),
            self.manager.fetch_today_active_energy(),
            workouts,
            calories,
        )
