"""Supabase repository for daily statistics."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calories_info.adapters.supabase_food_log_repository import LOG_TABLE
from calories_info.adapters.supabase_support import execute, parse_timestamp
from calories_info.domain.nutrition import MacroProfile
from calories_info.domain.stats import LoggedFood
from calories_info.services.stats import StatsRepository

_COLUMNS = (
    "id, dictionary_id, meal_type, quantity_grams, occurred_at, "
    "food_dict(product, kcal_100, protein_100, fat_100, carbs_100)"
)


@dataclass
class SupabaseStatsRepository(StatsRepository):
    """Joins log rows with dictionary macros through an embedded select."""

    client: Client

    def list_logged_foods(self, start: datetime, end: datetime) -> list[LoggedFood]:
        """Return log rows in ``[start, end)`` ordered by time then id."""
        rows = execute(
            self.client.table(LOG_TABLE)
            .select(_COLUMNS)
            .gte("occurred_at", start.isoformat())
            .lt("occurred_at", end.isoformat())
            .order("occurred_at", desc=False)
            .order("id", desc=False),
            action="list_logged_foods",
        )
        return [_parse_row(row) for row in rows]


def _parse_row(row: dict[str, object]) -> LoggedFood:
    food = row.get("food_dict") or {}
    return LoggedFood(
        log_id=int(row["id"]),
        dictionary_id=int(row["dictionary_id"]),
        product=str(food.get("product", "")),
        meal_type=str(row.get("meal_type") or "unspecified"),
        quantity_grams=float(row.get("quantity_grams") or 0.0),
        occurred_at=parse_timestamp(row.get("occurred_at"))
        or datetime.min.replace(tzinfo=UTC),
        macros_100=MacroProfile(
            kcal=float(food.get("kcal_100") or 0.0),
            protein=float(food.get("protein_100") or 0.0),
            fat=float(food.get("fat_100") or 0.0),
            carbs=float(food.get("carbs_100") or 0.0),
        ),
    )
