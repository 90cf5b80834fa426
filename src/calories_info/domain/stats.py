"""Domain models for daily statistics."""

from dataclasses import dataclass
from datetime import date, datetime

from calories_info.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class LoggedFood:
    """A log row joined with its dictionary macros."""

    log_id: int
    dictionary_id: int
    product: str
    meal_type: str
    quantity_grams: float
    occurred_at: datetime
    macros_100: MacroProfile


@dataclass(frozen=True)
class DailyStatsItem:
    """A log row with its computed contribution."""

    log_id: int
    dictionary_id: int
    product: str
    meal_type: str
    quantity_grams: float
    occurred_at: datetime
    contribution: MacroProfile


@dataclass(frozen=True)
class DailyTargets:
    """Configured daily targets; any of them may be unset."""

    kcal: float | None = None
    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.kcal, self.protein, self.fat, self.carbs)


@dataclass(frozen=True)
class DailyStats:
    """Totals and remaining targets for one calendar date."""

    day: date
    items: list[DailyStatsItem]
    totals: MacroProfile
    remaining: MacroProfile | None
