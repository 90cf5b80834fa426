"""External food source backed by USDA FoodData Central."""

import logging
from dataclasses import dataclass

import httpx

from calories_info.adapters.fdc_client import FdcClient
from calories_info.domain.nutrition import FoodRecord, FoodSource, MacroProfile
from calories_info.services.cache import Cache
from calories_info.services.sources import FoodSourceAdapter

_NUTRIENT_IDS = {
    "kcal": 1008,
    "protein": 1003,
    "fat": 1004,
    "carbs": 1005,
}

_logger = logging.getLogger(__name__)


@dataclass
class ExternalFoodSource(FoodSourceAdapter):
    """FDC search with caching; failures degrade to no results."""

    fdc_client: FdcClient | None
    cache: Cache
    search_ttl_seconds: float = 3600
    source: FoodSource = FoodSource.EXTERNAL_DB

    @property
    def is_configured(self) -> bool:
        return self.fdc_client is not None

    async def search(self, query: str, limit: int) -> list[FoodRecord]:
        """Search FDC foods, mapping nutrients into per-100 g macros."""
        if self.fdc_client is None:
            _logger.info("FDC search skipped: no API key configured")
            return []
        if limit <= 0:
            return []

        cache_key = f"fdc:search:{query.strip().lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        try:
            payload = await self.fdc_client.search_foods(query, page_size=limit)
            records = _parse_foods(payload)[:limit]
        except httpx.TimeoutException:
            _logger.warning("FDC search timed out", extra={"query": query})
            return []
        except httpx.HTTPError as exc:
            _logger.warning(
                "FDC search failed",
                extra={
                    "query": query,
                    "status": _status_code_from_exception(exc),
                    "error": str(exc),
                },
            )
            return []
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            _logger.warning(
                "FDC search returned a malformed payload",
                extra={"query": query, "error": str(exc)},
            )
            return []

        self.cache.set(cache_key, records, ttl_seconds=self.search_ttl_seconds)
        _logger.debug("FDC search", extra={"query": query, "results": len(records)})
        return records


def _parse_foods(payload: object) -> list[FoodRecord]:
    if not isinstance(payload, dict):
        raise ValueError("FDC payload is not an object")
    foods = payload.get("foods") or []
    if not isinstance(foods, list):
        raise ValueError("FDC payload 'foods' is not a list")
    records: list[FoodRecord] = []
    for food in foods:
        if not isinstance(food, dict) or food.get("fdcId") is None:
            continue
        macros = _extract_macros(food.get("foodNutrients") or [])
        records.append(
            FoodRecord(
                source=FoodSource.EXTERNAL_DB,
                id=f"usda_{food['fdcId']}",
                product=str(food.get("description") or ""),
                brand=food.get("brandOwner") or food.get("brandName"),
                kcal_100=macros.kcal,
                protein_100=macros.protein,
                fat_100=macros.fat,
                carbs_100=macros.carbs,
                meta={"fdcId": food["fdcId"], "type": food.get("dataType")},
            )
        )
    return records


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _extract_macros(food_nutrients: list[dict[str, object]]) -> MacroProfile:
    """Extract kcal, protein, fat, carbs from FDC nutrients; missing ones are 0."""
    values: dict[str, float] = dict.fromkeys(_NUTRIENT_IDS, 0.0)
    by_id = {nutrient_id: name for name, nutrient_id in _NUTRIENT_IDS.items()}
    for nutrient in food_nutrients:
        if not isinstance(nutrient, dict):
            continue
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        name = by_id.get(nutrient_id)
        if name is None:
            continue
        amount = nutrient.get("value", nutrient.get("amount"))
        if amount is None:
            continue
        values[name] = max(float(amount), 0.0)

    return MacroProfile(
        kcal=values["kcal"],
        protein=values["protein"],
        fat=values["fat"],
        carbs=values["carbs"],
    )
