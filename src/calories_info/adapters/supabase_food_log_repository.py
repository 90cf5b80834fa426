"""Supabase repository for the consumption log."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calories_info.adapters.supabase_support import execute, parse_timestamp
from calories_info.domain.dictionary import DictionaryEntry
from calories_info.domain.errors import StorageError
from calories_info.domain.logs import LogEntry, PendingLogEntry
from calories_info.services.food_log import FoodLogRepository

LOG_TABLE = "food_log"
# Postgres function that writes a whole batch in one transaction.
INGEST_FUNCTION = "log_food_entries"


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for log ingestion and corrections."""

    client: Client

    def insert_entries(
        self, entries: list[PendingLogEntry], logged_at: datetime
    ) -> list[LogEntry]:
        """Write the batch through the ``log_food_entries`` function."""
        rows = execute(
            self.client.rpc(
                INGEST_FUNCTION,
                {
                    "p_items": [_pending_payload(entry) for entry in entries],
                    "p_logged_at": logged_at.isoformat(),
                },
            ),
            action="insert_entries",
        )
        if len(rows) != len(entries):
            raise StorageError("insert_entries failed")
        return [_parse_log(row) for row in rows]

    def update_quantity(self, log_id: int, quantity_grams: float) -> LogEntry | None:
        """Update a log row's quantity in a single statement."""
        rows = execute(
            self.client.table(LOG_TABLE)
            .update({"quantity_grams": quantity_grams})
            .eq("id", log_id),
            action="update_quantity",
        )
        return _parse_log(rows[0]) if rows else None


def _pending_payload(entry: PendingLogEntry) -> dict[str, object]:
    payload: dict[str, object] = {
        "quantity_grams": entry.quantity_grams,
        "meal_type": entry.meal_type,
        "occurred_at": entry.occurred_at.isoformat() if entry.occurred_at else None,
    }
    food = entry.food
    if isinstance(food, DictionaryEntry):
        payload["dictionary_id"] = food.id
        return payload
    payload.update(
        {
            "dictionary_id": None,
            "product": food.product,
            "source": str(food.source),
            "kcal_100": food.macros.kcal,
            "protein_100": food.macros.protein,
            "fat_100": food.macros.fat,
            "carbs_100": food.macros.carbs,
        }
    )
    return payload


def _parse_log(row: dict[str, object]) -> LogEntry:
    return LogEntry(
        id=int(row["id"]),
        dictionary_id=int(row["dictionary_id"]),
        quantity_grams=float(row.get("quantity_grams") or 0.0),
        meal_type=str(row.get("meal_type") or "unspecified"),
        occurred_at=parse_timestamp(row.get("occurred_at"))
        or datetime.now(tz=UTC),
    )
