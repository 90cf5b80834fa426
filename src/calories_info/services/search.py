"""Food search across the local dictionary and external sources."""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from calories_info.domain.errors import InputValidationError
from calories_info.domain.nutrition import FoodRecord, FoodSource
from calories_info.services.merge import merge_records
from calories_info.services.sources import FoodSourceAdapter
from calories_info.services.translation import TranslationService

_logger = logging.getLogger(__name__)


class SearchMode(StrEnum):
    """How adapters are combined for a query."""

    # Try adapters in order; the first non-empty result wins.
    FALLBACK = "fallback"
    # Query every adapter concurrently and merge everything.
    FANOUT = "fanout"


@dataclass(frozen=True)
class SearchResult:
    """Ranked search results with per-source counts."""

    query: str
    external_query: str | None
    limit: int
    source: FoodSource | None
    counts: dict[str, int]
    results: list[FoodRecord]

    @property
    def status(self) -> str:
        return "ok" if self.results else "not_found"


@dataclass
class SearchService:
    """Runs the configured search strategy over the source adapters."""

    local: FoodSourceAdapter
    translation: TranslationService
    fallbacks: list[FoodSourceAdapter] = field(default_factory=list)
    mode: SearchMode = SearchMode.FALLBACK
    default_limit: int = 10
    max_limit: int = 25

    def resolve_limit(self, limit: int | None) -> int:
        """Apply the default for missing or non-positive limits, then the cap."""
        if limit is None or limit <= 0:
            limit = self.default_limit
        return min(limit, self.max_limit)

    async def search(self, query: str | None, limit: int | None = None) -> SearchResult:
        """Search for ``query`` and return at most ``limit`` ranked records."""
        cleaned = (query or "").strip()
        if not cleaned:
            raise InputValidationError("query: field required")
        resolved_limit = self.resolve_limit(limit)
        if self.mode is SearchMode.FANOUT:
            return await self._fan_out(cleaned, resolved_limit)
        return await self._fall_back(cleaned, resolved_limit)

    async def _fall_back(self, query: str, limit: int) -> SearchResult:
        counts = _empty_counts()
        external_query: str | None = None
        for adapter in [self.local, *self.fallbacks]:
            if not adapter.is_configured:
                continue
            adapter_query = query
            if adapter.source is FoodSource.EXTERNAL_DB:
                if external_query is None:
                    external_query = await self.translation.to_external(query)
                adapter_query = external_query
            records = await adapter.search(adapter_query, limit)
            counts[str(adapter.source)] += len(records)
            if not records:
                continue
            if adapter.source is FoodSource.LOCAL:
                results = records[:limit]
            else:
                results = merge_records(adapter_query, [records], limit)
                results = await self._translate_back(query, external_query, results)
            counts["total"] = len(results)
            return SearchResult(
                query=query,
                external_query=external_query,
                limit=limit,
                source=adapter.source,
                counts=counts,
                results=results,
            )

        _logger.info("Search found nothing", extra={"query": query})
        return SearchResult(
            query=query,
            external_query=external_query,
            limit=limit,
            source=None,
            counts=counts,
            results=[],
        )

    async def _fan_out(self, query: str, limit: int) -> SearchResult:
        adapters = [
            adapter
            for adapter in [self.local, *self.fallbacks]
            if adapter.is_configured
        ]
        external_query: str | None = None
        if any(adapter.source is FoodSource.EXTERNAL_DB for adapter in adapters):
            external_query = await self.translation.to_external(query)
        record_lists = await asyncio.gather(
            *(
                adapter.search(
                    external_query
                    if adapter.source is FoodSource.EXTERNAL_DB and external_query
                    else query,
                    limit,
                )
                for adapter in adapters
            )
        )
        counts = _empty_counts()
        for adapter, records in zip(adapters, record_lists, strict=True):
            counts[str(adapter.source)] += len(records)

        results = merge_records(external_query or query, record_lists, limit)
        results = await self._translate_back(query, external_query, results)
        counts["total"] = len(results)
        return SearchResult(
            query=query,
            external_query=external_query,
            limit=limit,
            source=results[0].source if results else None,
            counts=counts,
            results=results,
        )

    async def _translate_back(
        self, query: str, external_query: str | None, results: list[FoodRecord]
    ) -> list[FoodRecord]:
        """Return external names in the query's language when it was translated."""
        if external_query is None or external_query == query:
            return results

        async def translate(record: FoodRecord) -> FoodRecord:
            if record.source is not FoodSource.EXTERNAL_DB:
                return record
            product = await self.translation.from_external(record.product)
            return dataclasses.replace(record, product=product)

        return list(await asyncio.gather(*(translate(record) for record in results)))


def _empty_counts() -> dict[str, int]:
    counts = {str(source): 0 for source in FoodSource}
    counts["total"] = 0
    return counts
