"""Source adapters producing normalized food records.

Adapters never raise on recoverable failures; problems are logged and the
adapter returns an empty list.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from calories_info.domain.dictionary import DictionaryEntry
from calories_info.domain.errors import StorageError, UpstreamFatalError
from calories_info.domain.nutrition import FoodRecord, FoodSource
from calories_info.services.dictionary import DictionaryRepository
from calories_info.services.estimator import EstimatorService
from calories_info.services.merge import normalize

_logger = logging.getLogger(__name__)

_NEVER_USED = datetime.min.replace(tzinfo=UTC)


class FoodSourceAdapter(Protocol):
    """Uniform query interface over a nutrition provider."""

    source: FoodSource

    @property
    def is_configured(self) -> bool:
        """Whether the adapter can reach its provider at all."""

    async def search(self, query: str, limit: int) -> list[FoodRecord]:
        """Return up to ``limit`` records; empty on any recoverable failure."""


@dataclass
class LocalFoodSource(FoodSourceAdapter):
    """Searches the food dictionary."""

    repository: DictionaryRepository
    source: FoodSource = FoodSource.LOCAL

    @property
    def is_configured(self) -> bool:
        return True

    async def search(self, query: str, limit: int) -> list[FoodRecord]:
        try:
            entries = self.repository.search_entries(query, limit)
        except StorageError as exc:
            _logger.warning("Local search failed", extra={"error": str(exc)})
            return []
        ranked = rank_local_entries(query, entries)[:limit]
        return [_entry_to_record(entry) for entry in ranked]


def rank_local_entries(
    query: str, entries: list[DictionaryEntry]
) -> list[DictionaryEntry]:
    """Rank prefix matches first, then by usage, recency and name."""
    needle = normalize(query)

    def key(entry: DictionaryEntry) -> tuple[int, int, float, str]:
        name = normalize(entry.product)
        last_used = entry.last_used_at or _NEVER_USED
        if last_used.tzinfo is None:
            last_used = last_used.replace(tzinfo=UTC)
        return (
            0 if name.startswith(needle) else 1,
            -entry.usage_count,
            -last_used.timestamp(),
            name,
        )

    return sorted(entries, key=key)


def _entry_to_record(entry: DictionaryEntry) -> FoodRecord:
    return FoodRecord(
        source=FoodSource.LOCAL,
        id=str(entry.id),
        product=entry.product,
        brand=None,
        kcal_100=entry.macros.kcal,
        protein_100=entry.macros.protein,
        fat_100=entry.macros.fat,
        carbs_100=entry.macros.carbs,
        meta={
            "dictionary_source": str(entry.source),
            "usage_count": entry.usage_count,
            "last_used_at": (
                entry.last_used_at.isoformat() if entry.last_used_at else None
            ),
        },
    )


@dataclass
class EstimatorFoodSource(FoodSourceAdapter):
    """Returns a single LLM-estimated record for the query."""

    estimator: EstimatorService
    source: FoodSource = FoodSource.AI

    @property
    def is_configured(self) -> bool:
        return self.estimator.is_configured

    async def search(self, query: str, limit: int) -> list[FoodRecord]:
        if limit <= 0 or not self.estimator.is_configured:
            return []
        try:
            macros = await self.estimator.estimate(query)
        except UpstreamFatalError as exc:
            _logger.warning("Estimator search failed", extra={"error": str(exc)})
            return []
        return [
            FoodRecord(
                source=FoodSource.AI,
                id=f"ai_{normalize(query)}",
                product=query.strip(),
                brand=None,
                kcal_100=macros.kcal,
                protein_100=macros.protein,
                fat_100=macros.fat,
                carbs_100=macros.carbs,
                meta={"estimated": True},
            )
        ]
