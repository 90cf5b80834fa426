"""FastAPI application factory."""

import json
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from calories_info.app_logging import configure_logging
from calories_info.containers import AppContainer
from calories_info.domain.dictionary import DictionaryEntry
from calories_info.domain.errors import ErrorKind
from calories_info.domain.nutrition import FoodRecord, MacroProfile
from calories_info.domain.outcomes import Failure, Outcome
from calories_info.domain.stats import DailyStats
from calories_info.services.search import SearchResult

_CORS_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM_FATAL: 502,
    ErrorKind.NOT_CONFIGURED: 501,
    ErrorKind.STORAGE: 500,
    ErrorKind.INTERNAL: 500,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=_CORS_HEADERS,
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid4())
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request handled",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        response.headers["Cache-Control"] = "no-store"
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Check that the dictionary store is reachable."""
        state_container: AppContainer = request.app.state.container
        outcome = state_container.gateway.ping_storage()
        if isinstance(outcome, Failure):
            return JSONResponse({"ok": False}, status_code=500)
        return JSONResponse({"ok": True})

    @app.get("/api/search")
    async def search(
        request: Request, query: str | None = None, limit: str | None = None
    ) -> JSONResponse:
        """Search the dictionary, then external sources."""
        state_container: AppContainer = request.app.state.container
        parsed_limit: int | None = None
        if limit is not None and limit.strip():
            try:
                parsed_limit = int(limit)
            except ValueError:
                return _error_response(ErrorKind.VALIDATION, "limit: invalid")
        outcome = await state_container.gateway.search(query, parsed_limit)
        return _respond(outcome, _search_payload)

    @app.post("/api/auto-add")
    async def auto_add(request: Request) -> JSONResponse:
        """Add a dictionary entry with client-supplied macros."""
        state_container: AppContainer = request.app.state.container
        body = await _read_json(request)
        if isinstance(body, JSONResponse):
            return body
        outcome = state_container.gateway.add_dictionary_entry(body)
        return _respond(outcome, _entry_payload)

    @app.post("/api/dict/create_via_ai")
    async def create_via_ai(request: Request) -> JSONResponse:
        """Create or refresh a dictionary entry from estimated macros."""
        state_container: AppContainer = request.app.state.container
        body = await _read_json(request)
        if isinstance(body, JSONResponse):
            return body
        product = body.get("product") if isinstance(body, dict) else None
        outcome = await state_container.gateway.create_dictionary_entry(product)
        return _respond(outcome, _entry_payload)

    @app.post("/api/dict/update")
    async def update_dictionary(request: Request) -> JSONResponse:
        """Correct the macros of a dictionary entry."""
        state_container: AppContainer = request.app.state.container
        body = await _read_json(request)
        if isinstance(body, JSONResponse):
            return body
        outcome = state_container.gateway.update_dictionary_entry(body)
        return _respond(outcome, _entry_payload)

    @app.post("/api/log/add_list")
    async def add_log_list(request: Request) -> JSONResponse:
        """Record a batch of consumption events."""
        state_container: AppContainer = request.app.state.container
        body = await _read_json(request)
        if isinstance(body, JSONResponse):
            return body
        if not isinstance(body, list):
            return _error_response(
                ErrorKind.VALIDATION, "Request body must be a non-empty array"
            )
        outcome = await state_container.gateway.add_log_entries(body)
        return _respond(outcome, _stats_payload)

    @app.post("/api/log/update_item")
    async def update_log_item(request: Request) -> JSONResponse:
        """Correct the quantity of a logged item."""
        state_container: AppContainer = request.app.state.container
        body = await _read_json(request)
        if isinstance(body, JSONResponse):
            return body
        if not isinstance(body, dict):
            return _error_response(
                ErrorKind.VALIDATION, "Request body must be an object"
            )
        outcome = state_container.gateway.update_log_item(body)
        return _respond(outcome, _stats_payload)

    @app.get("/api/stats/daily")
    async def daily_stats(request: Request, date: str | None = None) -> JSONResponse:
        """Return totals and remaining targets for a date."""
        state_container: AppContainer = request.app.state.container
        day = date if date and date.strip() else None
        outcome = state_container.gateway.get_daily_stats(day)
        return _respond(outcome, _stats_payload)

    return app


async def _read_json(request: Request) -> object:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error_response(ErrorKind.VALIDATION, "Request body must be JSON")


def _respond(
    outcome: Outcome[object], render: Callable[[object], dict[str, object]]
) -> JSONResponse:
    if isinstance(outcome, Failure):
        return _error_response(outcome.kind, outcome.message)
    return JSONResponse(render(outcome.value))


def _error_response(kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        {"error": str(kind), "detail": message},
        status_code=_STATUS_BY_KIND.get(kind, 500),
    )


def _macros_payload(macros: MacroProfile) -> dict[str, float]:
    return {
        "kcal": round(macros.kcal, 2),
        "protein": round(macros.protein, 2),
        "fat": round(macros.fat, 2),
        "carbs": round(macros.carbs, 2),
    }


def _record_payload(record: FoodRecord) -> dict[str, object]:
    return {
        "source": str(record.source),
        "id": record.id,
        "product": record.product,
        "brand": record.brand,
        "kcal_100": record.kcal_100,
        "protein_100": record.protein_100,
        "fat_100": record.fat_100,
        "carbs_100": record.carbs_100,
        "meta": record.meta,
    }


def _search_payload(result: SearchResult) -> dict[str, object]:
    return {
        "query": result.query,
        "external_query": result.external_query,
        "limit": result.limit,
        "status": result.status,
        "source": str(result.source) if result.source else None,
        "counts": result.counts,
        "results": [_record_payload(record) for record in result.results],
    }


def _entry_payload(entry: DictionaryEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "product": entry.product,
        "source": str(entry.source),
        "kcal_100": entry.macros.kcal,
        "protein_100": entry.macros.protein,
        "fat_100": entry.macros.fat,
        "carbs_100": entry.macros.carbs,
        "usage_count": entry.usage_count,
        "last_used_at": _isoformat(entry.last_used_at),
        "created_at": _isoformat(entry.created_at),
        "updated_at": _isoformat(entry.updated_at),
    }


def _stats_payload(stats: DailyStats) -> dict[str, object]:
    return {
        "date": stats.day.isoformat(),
        "macros_total": _macros_payload(stats.totals),
        "macros_left": (
            _macros_payload(stats.remaining) if stats.remaining is not None else None
        ),
        "items": [
            {
                "id": item.log_id,
                "product_id": item.dictionary_id,
                "product": item.product,
                "meal_type": item.meal_type,
                "quantity_grams": item.quantity_grams,
                "occurred_at": item.occurred_at.isoformat(),
                **_macros_payload(item.contribution),
            }
            for item in stats.items
        ],
    }


def _isoformat(value: object) -> str | None:
    return value.isoformat() if value is not None else None
