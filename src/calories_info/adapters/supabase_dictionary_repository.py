"""Supabase implementation for the food dictionary."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calories_info.adapters.supabase_support import (
    escape_like,
    execute,
    parse_timestamp,
)
from calories_info.domain.dictionary import (
    DictionaryEntry,
    DictionarySource,
    NewDictionaryEntry,
    product_key,
)
from calories_info.domain.errors import StorageError
from calories_info.domain.nutrition import MacroProfile
from calories_info.services.dictionary import DictionaryRepository

DICTIONARY_TABLE = "food_dict"


@dataclass
class SupabaseDictionaryRepository(DictionaryRepository):
    """Supabase-backed food dictionary.

    ``product_key`` is a stored generated column (``lower(btrim(product))``)
    carrying the unique constraint, so upserts can target it directly.
    """

    client: Client

    def get_entry(self, entry_id: int) -> DictionaryEntry | None:
        """Return an entry by id, if present."""
        rows = execute(
            self.client.table(DICTIONARY_TABLE).select("*").eq("id", entry_id).limit(1),
            action="get_entry",
        )
        return _parse_entry(rows[0]) if rows else None

    def find_by_product(self, product: str) -> DictionaryEntry | None:
        """Return the entry whose name matches case-insensitively."""
        rows = execute(
            self.client.table(DICTIONARY_TABLE)
            .select("*")
            .eq("product_key", product_key(product))
            .limit(1),
            action="find_by_product",
        )
        return _parse_entry(rows[0]) if rows else None

    def search_entries(self, query: str, limit: int) -> list[DictionaryEntry]:
        """Return prefix matches first, topped up with substring matches."""
        escaped = escape_like(query.strip())
        entries = [
            _parse_entry(row) for row in self._ranked_match(f"{escaped}%", limit)
        ]
        if len(entries) < limit:
            seen = {entry.id for entry in entries}
            for row in self._ranked_match(f"%{escaped}%", limit):
                entry = _parse_entry(row)
                if entry.id not in seen:
                    seen.add(entry.id)
                    entries.append(entry)
        return entries[:limit]

    def insert_if_absent(self, entry: NewDictionaryEntry) -> DictionaryEntry:
        """Insert with ``ON CONFLICT DO NOTHING`` and return the surviving row."""
        execute(
            self.client.table(DICTIONARY_TABLE).upsert(
                _entry_payload(entry),
                on_conflict="product_key",
                ignore_duplicates=True,
            ),
            action="insert_if_absent",
        )
        stored = self.find_by_product(entry.product)
        if stored is None:
            raise StorageError("insert_if_absent failed")
        return stored

    def upsert_entry(self, entry: NewDictionaryEntry) -> DictionaryEntry:
        """Insert, or refresh macros of the existing row with the same name."""
        payload = {
            **_entry_payload(entry),
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        rows = execute(
            self.client.table(DICTIONARY_TABLE).upsert(
                payload, on_conflict="product_key"
            ),
            action="upsert_entry",
        )
        if not rows:
            raise StorageError("upsert_entry failed")
        return _parse_entry(rows[0])

    def update_macros(
        self, entry_id: int, macros: MacroProfile
    ) -> DictionaryEntry | None:
        """Replace macros of an existing entry."""
        rows = execute(
            self.client.table(DICTIONARY_TABLE)
            .update(
                {
                    **_macros_payload(macros),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", entry_id),
            action="update_macros",
        )
        return _parse_entry(rows[0]) if rows else None

    def ping(self) -> None:
        """Run a trivial query against the dictionary table."""
        execute(
            self.client.table(DICTIONARY_TABLE).select("id").limit(1), action="ping"
        )

    def _ranked_match(self, pattern: str, limit: int) -> list[dict[str, object]]:
        return execute(
            self.client.table(DICTIONARY_TABLE)
            .select("*")
            .ilike("product", pattern)
            .order("usage_count", desc=True)
            .order("last_used_at", desc=True, nullsfirst=False)
            .order("product_key")
            .limit(limit),
            action="search_entries",
        )


def _macros_payload(macros: MacroProfile) -> dict[str, float]:
    return {
        "kcal_100": macros.kcal,
        "protein_100": macros.protein,
        "fat_100": macros.fat,
        "carbs_100": macros.carbs,
    }


def _entry_payload(entry: NewDictionaryEntry) -> dict[str, object]:
    return {
        "product": entry.product.strip(),
        "source": str(entry.source),
        **_macros_payload(entry.macros),
    }


def _parse_entry(row: dict[str, object]) -> DictionaryEntry:
    """Parse a dictionary row into a domain model."""
    return DictionaryEntry(
        id=int(row["id"]),
        product=str(row.get("product", "")),
        source=DictionarySource(row.get("source") or DictionarySource.MANUAL),
        macros=MacroProfile(
            kcal=float(row.get("kcal_100") or 0.0),
            protein=float(row.get("protein_100") or 0.0),
            fat=float(row.get("fat_100") or 0.0),
            carbs=float(row.get("carbs_100") or 0.0),
        ),
        usage_count=int(row.get("usage_count") or 0),
        last_used_at=parse_timestamp(row.get("last_used_at")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )
