"""Dictionary resolution: find or create canonical food entries."""

import logging
from dataclasses import dataclass
from typing import Protocol

from calories_info.domain.dictionary import (
    DictionaryEntry,
    DictionaryEntryInput,
    DictionarySource,
    DictionaryUpdateInput,
    NewDictionaryEntry,
)
from calories_info.domain.errors import InputValidationError, NotFoundError
from calories_info.domain.nutrition import MacroProfile
from calories_info.services.estimator import EstimatorService
from calories_info.services.inputs import parse_input

_logger = logging.getLogger(__name__)


class DictionaryRepository(Protocol):
    """Persistence interface for the food dictionary."""

    def get_entry(self, entry_id: int) -> DictionaryEntry | None:
        """Return an entry by id, if present."""

    def find_by_product(self, product: str) -> DictionaryEntry | None:
        """Return the entry whose name matches case-insensitively."""

    def search_entries(self, query: str, limit: int) -> list[DictionaryEntry]:
        """Return entries whose name contains ``query`` case-insensitively."""

    def insert_if_absent(self, entry: NewDictionaryEntry) -> DictionaryEntry:
        """Insert unless the name exists; return the surviving row."""

    def upsert_entry(self, entry: NewDictionaryEntry) -> DictionaryEntry:
        """Insert, or refresh the macros of the existing row with that name."""

    def update_macros(
        self, entry_id: int, macros: MacroProfile
    ) -> DictionaryEntry | None:
        """Replace macros of an existing entry; ``None`` when it is absent."""

    def ping(self) -> None:
        """Raise if the store cannot be reached."""


@dataclass
class DictionaryService:
    """Owns every mutation of the food dictionary."""

    repository: DictionaryRepository
    estimator: EstimatorService

    def get_entry(self, entry_id: int) -> DictionaryEntry:
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("product_not_found")
        return entry

    async def prepare(self, product: str) -> DictionaryEntry | NewDictionaryEntry:
        """Return the existing entry, or an estimated entry not yet stored.

        The lookup path never touches usage counters.
        """
        name = _clean_product(product)
        existing = self.repository.find_by_product(name)
        if existing is not None:
            return existing
        macros = await self.estimator.estimate(name)
        _logger.info("Estimated macros for new product", extra={"product": name})
        return NewDictionaryEntry(
            product=name, source=DictionarySource.AI_ESTIMATED, macros=macros
        )

    async def resolve_or_create(self, product: str) -> DictionaryEntry:
        """Find an entry by name, creating it from an estimate when absent.

        Concurrent creation of the same name resolves to a single row; the
        first writer's macros are kept.
        """
        prepared = await self.prepare(product)
        if isinstance(prepared, DictionaryEntry):
            return prepared
        return self.repository.insert_if_absent(prepared)

    async def create_via_estimator(self, product: str) -> DictionaryEntry:
        """Estimate macros for a name and store them, refreshing an existing row."""
        name = _clean_product(product)
        macros = await self.estimator.estimate(name)
        return self.repository.upsert_entry(
            NewDictionaryEntry(
                product=name, source=DictionarySource.AI_ESTIMATED, macros=macros
            )
        )

    def add_entry(self, payload: object) -> DictionaryEntry:
        """Add an entry with client-supplied macros, refreshing an existing row."""
        data = parse_input(DictionaryEntryInput, payload)
        return self.repository.upsert_entry(
            NewDictionaryEntry(
                product=data.product, source=data.source, macros=data.to_profile()
            )
        )

    def update_entry(self, payload: object) -> DictionaryEntry:
        """Correct the macros of an existing entry.

        Usage counters and ``last_used_at`` are left untouched.
        """
        data = parse_input(DictionaryUpdateInput, payload)
        updated = self.repository.update_macros(data.product_id, data.to_profile())
        if updated is None:
            raise NotFoundError("product_not_found")
        return updated


def _clean_product(product: object) -> str:
    if not isinstance(product, str) or not product.strip():
        raise InputValidationError("product: field required")
    return product.strip()
