"""Daily nutrition statistics."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from calories_info.domain.errors import InputValidationError
from calories_info.domain.nutrition import MacroProfile
from calories_info.domain.stats import (
    DailyStats,
    DailyStatsItem,
    DailyTargets,
    LoggedFood,
)


class StatsRepository(Protocol):
    """Persistence interface for log rows joined with dictionary macros."""

    def list_logged_foods(self, start: datetime, end: datetime) -> list[LoggedFood]:
        """Return log rows with ``start <= occurred_at < end``."""


@dataclass
class StatsService:
    """Computes daily totals and remaining targets in a fixed timezone."""

    repository: StatsRepository
    targets: DailyTargets = field(default_factory=DailyTargets)
    timezone_name: str = "UTC"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def today(self) -> date:
        return datetime.now(tz=self.tz).date()

    def day_of(self, moment: datetime) -> date:
        """Return the calendar date of ``moment`` in the stats timezone."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return moment.astimezone(self.tz).date()

    def parse_day(self, value: date | datetime | str | None) -> date:
        """Parse a date argument; ``None`` means today."""
        if value is None:
            return self.today()
        if isinstance(value, datetime):
            return self.day_of(value)
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            raw = value.strip()
            try:
                return date.fromisoformat(raw)
            except ValueError:
                pass
            try:
                return self.day_of(datetime.fromisoformat(raw))
            except ValueError:
                pass
        raise InputValidationError("date: invalid_date")

    def get_daily_stats(self, value: date | datetime | str | None = None) -> DailyStats:
        """Return itemized contributions, totals and remaining targets."""
        day = self.parse_day(value)
        start = datetime.combine(day, datetime.min.time(), tzinfo=self.tz)
        end = start + timedelta(days=1)
        rows = self.repository.list_logged_foods(
            start.astimezone(UTC), end.astimezone(UTC)
        )
        return build_daily_stats(day, rows, self.targets)


def build_daily_stats(
    day: date, rows: list[LoggedFood], targets: DailyTargets
) -> DailyStats:
    """Compute per-entry contributions, totals and remaining targets."""
    ordered = sorted(rows, key=lambda row: (row.occurred_at, row.log_id))
    items: list[DailyStatsItem] = []
    totals = MacroProfile.zero()
    for row in ordered:
        contribution = row.macros_100.scaled(row.quantity_grams)
        totals = totals + contribution
        items.append(
            DailyStatsItem(
                log_id=row.log_id,
                dictionary_id=row.dictionary_id,
                product=row.product,
                meal_type=row.meal_type,
                quantity_grams=row.quantity_grams,
                occurred_at=row.occurred_at,
                contribution=contribution,
            )
        )
    return DailyStats(
        day=day,
        items=items,
        totals=totals,
        remaining=_remaining(totals, targets),
    )


def _remaining(totals: MacroProfile, targets: DailyTargets) -> MacroProfile | None:
    if not targets.is_complete:
        return None
    return MacroProfile(
        kcal=max(targets.kcal - totals.kcal, 0.0),
        protein=max(targets.protein - totals.protein, 0.0),
        fat=max(targets.fat - totals.fat, 0.0),
        carbs=max(targets.carbs - totals.carbs, 0.0),
    )
