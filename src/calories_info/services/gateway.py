"""Gateway exposing every core operation as a success or failure outcome."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from calories_info.domain.dictionary import DictionaryEntry
from calories_info.domain.errors import CaloriesError, ErrorKind
from calories_info.domain.outcomes import Failure, Outcome, Success
from calories_info.domain.stats import DailyStats
from calories_info.services.dictionary import DictionaryService
from calories_info.services.food_log import FoodLogService
from calories_info.services.search import SearchResult, SearchService
from calories_info.services.stats import StatsService

T = TypeVar("T")

_logger = logging.getLogger(__name__)

_PUBLIC_MESSAGES = {
    ErrorKind.UPSTREAM_FATAL: "Macro estimation failed",
    ErrorKind.NOT_CONFIGURED: "Macro estimator is not configured",
    ErrorKind.STORAGE: "Storage error",
    ErrorKind.INTERNAL: "Internal error",
}
_CLIENT_KINDS = {ErrorKind.VALIDATION, ErrorKind.NOT_FOUND}


@dataclass
class CaloriesGateway:
    """Wraps the services so callers never see raw exceptions."""

    search_service: SearchService
    dictionary_service: DictionaryService
    food_log_service: FoodLogService
    stats_service: StatsService

    async def search(
        self, query: str | None, limit: int | None = None
    ) -> Outcome[SearchResult]:
        return await _run_async(
            "search", lambda: self.search_service.search(query, limit)
        )

    async def add_log_entries(self, items: Sequence[object]) -> Outcome[DailyStats]:
        return await _run_async(
            "add_log_entries", lambda: self.food_log_service.add_entries(items)
        )

    def update_log_quantity(
        self, log_id: object, quantity_grams: object
    ) -> Outcome[DailyStats]:
        return _run(
            "update_log_quantity",
            lambda: self.food_log_service.update_quantity(log_id, quantity_grams),
        )

    def update_log_item(self, payload: object) -> Outcome[DailyStats]:
        return _run(
            "update_log_item", lambda: self.food_log_service.update_item(payload)
        )

    def get_daily_stats(self, day: object = None) -> Outcome[DailyStats]:
        return _run("get_daily_stats", lambda: self.stats_service.get_daily_stats(day))

    def add_dictionary_entry(self, payload: object) -> Outcome[DictionaryEntry]:
        return _run(
            "add_dictionary_entry",
            lambda: self.dictionary_service.add_entry(payload),
        )

    async def create_dictionary_entry(
        self, product: object
    ) -> Outcome[DictionaryEntry]:
        return await _run_async(
            "create_dictionary_entry",
            lambda: self.dictionary_service.create_via_estimator(product),
        )

    def update_dictionary_entry(self, payload: object) -> Outcome[DictionaryEntry]:
        return _run(
            "update_dictionary_entry",
            lambda: self.dictionary_service.update_entry(payload),
        )

    def ping_storage(self) -> Outcome[None]:
        return _run(
            "ping_storage", lambda: self.dictionary_service.repository.ping()
        )


def _run(operation: str, func: Callable[[], T]) -> Outcome[T]:
    try:
        return Success(func())
    except CaloriesError as exc:
        return _failure(operation, exc)
    except Exception:
        _logger.exception("Unexpected error", extra={"operation": operation})
        return Failure(ErrorKind.INTERNAL, _PUBLIC_MESSAGES[ErrorKind.INTERNAL])


async def _run_async(
    operation: str, func: Callable[[], Awaitable[T]]
) -> Outcome[T]:
    try:
        return Success(await func())
    except CaloriesError as exc:
        return _failure(operation, exc)
    except Exception:
        _logger.exception("Unexpected error", extra={"operation": operation})
        return Failure(ErrorKind.INTERNAL, _PUBLIC_MESSAGES[ErrorKind.INTERNAL])


def _failure(operation: str, exc: CaloriesError) -> Failure:
    log = _logger.warning if exc.kind in _CLIENT_KINDS else _logger.error
    log(
        "Operation failed",
        extra={"operation": operation, "kind": str(exc.kind), "error": str(exc)},
    )
    message = _PUBLIC_MESSAGES.get(exc.kind, str(exc))
    return Failure(exc.kind, message)

