"""Date ranges and duration formatting."""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


class DateTimeNormalizer:
    """Computes query windows and display strings for dates and durations."""

    @staticmethod
    def start_of_day(moment: datetime) -> datetime:
        """Midnight of the day containing ``moment`` (same tzinfo)."""
        return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)

    @classmethod
    def today_range(cls, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """From the start of today until ``now``."""
        now = now or datetime.now()
        return cls.start_of_day(now), now

    @classmethod
    def last_days_range(
        cls, days: int, now: Optional[datetime] = None
    ) -> Tuple[datetime, datetime]:
        """
        Window covering the last ``days`` calendar days, today included.

        Example: days=30 on 2026-10-19 14:00 -> (2026-09-20 00:00, 2026-10-19 14:00)
        """
        if days < 1:
            raise ValueError("days must be >= 1")
        now = now or datetime.now()
        start = cls.start_of_day(now) - timedelta(days=days - 1)
        return start, now

    @staticmethod
    def days_between(start: date, end: date) -> list[date]:
        """Every calendar day from ``start`` to ``end`` inclusive."""
        if end < start:
            return []
        return [start + timedelta(days=i) for i in range((end - start).days + 1)]

    @staticmethod
    def format_duration(duration: timedelta) -> str:
        """
        Abbreviated hours and minutes.

        Examples:
        - 45 min -> '45m'
        - 65 min -> '1h 5m'
        - 2 h -> '2h'
        """
        total_minutes = max(0, int(duration.total_seconds() // 60))
        hours, minutes = divmod(total_minutes, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours}h"
        return f"{minutes}m"

    @staticmethod
    def format_timestamp(moment: datetime) -> str:
        """
        Abbreviated date with short time.

        Example: datetime(2026, 10, 19, 7, 5) -> '19 Oct 2026, 07:05'
        """
        return f"{moment.day} {moment.strftime('%b %Y, %H:%M')}"
