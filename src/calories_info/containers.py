"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calories_info.adapters.fdc_client import HttpxFdcClient
from calories_info.adapters.openai_estimator_client import OpenAIEstimatorClient
from calories_info.adapters.supabase_dictionary_repository import (
    SupabaseDictionaryRepository,
)
from calories_info.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from calories_info.adapters.supabase_stats_repository import SupabaseStatsRepository
from calories_info.adapters.translate_client import HttpxTranslateClient
from calories_info.config import Settings, blank_to_none
from calories_info.services.cache import InMemoryCache
from calories_info.services.dictionary import DictionaryService
from calories_info.services.estimator import EstimatorService
from calories_info.services.external_foods import ExternalFoodSource
from calories_info.services.food_log import FoodLogService
from calories_info.services.gateway import CaloriesGateway
from calories_info.services.search import SearchMode, SearchService
from calories_info.services.sources import (
    EstimatorFoodSource,
    FoodSourceAdapter,
    LocalFoodSource,
)
from calories_info.services.stats import StatsService
from calories_info.services.translation import TranslationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    search_service: SearchService
    dictionary_service: DictionaryService
    food_log_service: FoodLogService
    stats_service: StatsService
    gateway: CaloriesGateway
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    dictionary_repository = SupabaseDictionaryRepository(supabase_client)
    food_log_repository = SupabaseFoodLogRepository(supabase_client)
    stats_repository = SupabaseStatsRepository(supabase_client)

    openai_api_key = blank_to_none(resolved_settings.openai_api_key)
    estimator_client = (
        OpenAIEstimatorClient.create(
            openai_api_key, resolved_settings.openai_timeout_seconds
        )
        if openai_api_key
        else None
    )
    fdc_api_key = blank_to_none(resolved_settings.fdc_api_key)
    fdc_client = (
        HttpxFdcClient.create(
            api_key=fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
            timeout_seconds=resolved_settings.fdc_timeout_seconds,
        )
        if fdc_api_key
        else None
    )
    translate_client = (
        HttpxTranslateClient.create(
            base_url=resolved_settings.translate_base_url,
            timeout_seconds=resolved_settings.translate_timeout_seconds,
        )
        if resolved_settings.translate_enabled
        else None
    )

    estimator = EstimatorService(
        client=estimator_client, model=resolved_settings.openai_model
    )
    fallbacks: list[FoodSourceAdapter] = [
        ExternalFoodSource(
            fdc_client=fdc_client,
            cache=InMemoryCache(),
            search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        )
    ]
    if resolved_settings.search_use_estimator:
        fallbacks.append(EstimatorFoodSource(estimator))
    search_service = SearchService(
        local=LocalFoodSource(dictionary_repository),
        translation=TranslationService(
            client=translate_client,
            user_language=resolved_settings.translate_source_language,
            external_language=resolved_settings.translate_target_language,
        ),
        fallbacks=fallbacks,
        mode=SearchMode(resolved_settings.search_mode),
        default_limit=resolved_settings.search_default_limit,
        max_limit=resolved_settings.search_max_limit,
    )
    dictionary_service = DictionaryService(dictionary_repository, estimator)
    stats_service = StatsService(
        stats_repository,
        targets=resolved_settings.daily_targets(),
        timezone_name=resolved_settings.stats_timezone,
    )
    food_log_service = FoodLogService(
        repository=food_log_repository,
        dictionary=dictionary_service,
        stats=stats_service,
    )
    gateway = CaloriesGateway(
        search_service=search_service,
        dictionary_service=dictionary_service,
        food_log_service=food_log_service,
        stats_service=stats_service,
    )

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()
        if translate_client is not None:
            await translate_client.close()
        if estimator_client is not None:
            await estimator_client.close()

    return AppContainer(
        settings=resolved_settings,
        search_service=search_service,
        dictionary_service=dictionary_service,
        food_log_service=food_log_service,
        stats_service=stats_service,
        gateway=gateway,
        close_resources=close_resources,
    )
