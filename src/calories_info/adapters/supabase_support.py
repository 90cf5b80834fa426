"""Helpers shared by the Supabase repositories."""

import logging
from datetime import datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError

from calories_info.domain.errors import StorageError

_logger = logging.getLogger(__name__)


def execute(query: Any, *, action: str) -> list[dict[str, Any]]:
    """Execute a PostgREST query, translating failures into ``StorageError``."""
    try:
        response = query.execute()
    except APIError as exc:
        _logger.error(
            "Supabase request failed",
            extra={"action": action, "code": exc.code, "error": exc.message},
        )
        raise StorageError(f"{action} failed") from exc
    except httpx.HTTPError as exc:
        _logger.error(
            "Supabase unreachable", extra={"action": action, "error": str(exc)}
        )
        raise StorageError(f"{action} failed") from exc
    data = response.data
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO-8601 timestamp column."""
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
