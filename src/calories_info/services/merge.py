"""Deduplication and ranking of search candidates from several sources."""

from collections.abc import Iterable, Sequence

from calories_info.domain.nutrition import FoodRecord, FoodSource

SOURCE_PRIORITY: dict[FoodSource, int] = {
    FoodSource.LOCAL: 1,
    FoodSource.EXTERNAL_DB: 2,
    FoodSource.AI: 3,
}
_UNKNOWN_PRIORITY = 99


def normalize(value: str | None) -> str:
    """Lowercase and trim a value; ``None`` becomes an empty string."""
    return (value or "").strip().lower()


def merge_records(
    query: str, record_lists: Iterable[Sequence[FoodRecord]], limit: int
) -> list[FoodRecord]:
    """Merge candidates into one ranked list.

    Duplicates share normalized product, normalized brand and source; the
    first occurrence is kept. Ordering is source priority, then names
    starting with the query, then names containing it, then name.
    """
    seen: set[tuple[str, str, FoodSource]] = set()
    unique: list[FoodRecord] = []
    for records in record_lists:
        for record in records:
            key = (normalize(record.product), normalize(record.brand), record.source)
            if key in seen:
                continue
            seen.add(key)
            unique.append(record)

    needle = normalize(query)
    unique.sort(key=lambda record: _rank_key(record, needle))
    return unique[: max(limit, 0)]


def _rank_key(record: FoodRecord, needle: str) -> tuple[int, int, int, str]:
    name = normalize(record.product)
    return (
        SOURCE_PRIORITY.get(record.source, _UNKNOWN_PRIORITY),
        0 if name.startswith(needle) else 1,
        0 if needle in name else 1,
        name,
    )
