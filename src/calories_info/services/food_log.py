"""Consumption log ingestion."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from calories_info.domain.dictionary import (
    DictionaryEntry,
    NewDictionaryEntry,
    product_key,
)
from calories_info.domain.errors import InputValidationError, NotFoundError
from calories_info.domain.logs import (
    LogEntry,
    LogItemInput,
    PendingLogEntry,
    QuantityUpdateInput,
)
from calories_info.domain.stats import DailyStats
from calories_info.services.dictionary import DictionaryService
from calories_info.services.inputs import parse_input
from calories_info.services.stats import StatsService

_logger = logging.getLogger(__name__)


class FoodLogRepository(Protocol):
    """Persistence interface for the consumption log."""

    def insert_entries(
        self, entries: list[PendingLogEntry], logged_at: datetime
    ) -> list[LogEntry]:
        """Write a batch atomically.

        New dictionary entries are inserted if absent, every log row is
        inserted and each referenced entry gets ``usage_count + 1`` and
        ``last_used_at = logged_at``. Nothing is written when any row fails.
        """

    def update_quantity(self, log_id: int, quantity_grams: float) -> LogEntry | None:
        """Set the quantity of a log entry; ``None`` when it is absent."""


@dataclass
class FoodLogService:
    """Validates, resolves and records consumption events."""

    repository: FoodLogRepository
    dictionary: DictionaryService
    stats: StatsService

    async def add_entries(self, items: Sequence[object]) -> DailyStats:
        """Record a batch of consumption events and return today's stats.

        All items are validated before any estimator call or write, and the
        batch is written in one atomic step.
        """
        inputs = _parse_items(items)
        pending = await self._resolve(inputs)
        logged_at = datetime.now(tz=UTC)
        written = self.repository.insert_entries(pending, logged_at)
        _logger.info(
            "Logged food entries",
            extra={"count": len(written), "log_ids": [entry.id for entry in written]},
        )
        return self.stats.get_daily_stats(self.stats.day_of(logged_at))

    def update_quantity(self, log_id: object, quantity_grams: object) -> DailyStats:
        """Correct a logged quantity; stats are for the entry's original date."""
        return self.update_item({"id": log_id, "quantity_grams": quantity_grams})

    def update_item(self, payload: object) -> DailyStats:
        """Apply a quantity correction payload (any quantity spelling)."""
        data = parse_input(QuantityUpdateInput, payload)
        updated = self.repository.update_quantity(data.id, data.quantity_grams)
        if updated is None:
            raise NotFoundError("log_not_found")
        return self.stats.get_daily_stats(self.stats.day_of(updated.occurred_at))

    async def _resolve(self, inputs: list[LogItemInput]) -> list[PendingLogEntry]:
        by_id: dict[int, DictionaryEntry] = {}
        by_name: dict[str, DictionaryEntry | NewDictionaryEntry] = {}
        for item in inputs:
            if item.product_id is not None and item.product_id not in by_id:
                by_id[item.product_id] = self.dictionary.get_entry(item.product_id)

        pending: list[PendingLogEntry] = []
        for item in inputs:
            if item.product_id is not None:
                food: DictionaryEntry | NewDictionaryEntry = by_id[item.product_id]
            else:
                key = product_key(item.product or "")
                if key not in by_name:
                    by_name[key] = await self.dictionary.prepare(item.product or "")
                food = by_name[key]
            pending.append(
                PendingLogEntry(
                    food=food,
                    quantity_grams=item.quantity_grams,
                    meal_type=item.meal_type,
                    occurred_at=item.occurred_at,
                )
            )
        return pending


def _parse_items(items: Sequence[object]) -> list[LogItemInput]:
    if isinstance(items, str | bytes) or not isinstance(items, Sequence):
        raise InputValidationError("Request body must be a non-empty array")
    if not items:
        raise InputValidationError("Request body must be a non-empty array")
    parsed: list[LogItemInput] = []
    for index, item in enumerate(items):
        try:
            parsed.append(parse_input(LogItemInput, item))
        except InputValidationError as exc:
            raise InputValidationError(f"items[{index}].{exc}") from exc
    return parsed
