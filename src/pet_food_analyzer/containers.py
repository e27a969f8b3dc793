"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pet_food_analyzer.adapters.openai_reasoning_client import OpenAIReasoningClient
from pet_food_analyzer.adapters.page_fetcher import HttpxPageFetcher
from pet_food_analyzer.adapters.supabase_analysis_repository import (
    SupabaseAnalysisRepository,
)
from pet_food_analyzer.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from pet_food_analyzer.config import Settings
from pet_food_analyzer.services.analyses import AnalysisPersister, AnalysisService
from pet_food_analyzer.services.analyzer import AnalyzerService
from pet_food_analyzer.services.ingredients import (
    ManualIngredientSource,
    ProductScraper,
)
from pet_food_analyzer.services.products import ProductResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    product_repository = SupabaseProductRepository(supabase_client)
    analysis_repository = SupabaseAnalysisRepository(supabase_client)
    page_fetcher = HttpxPageFetcher.create(
        user_agent=resolved_settings.scraper_user_agent,
        timeout_seconds=resolved_settings.scraper_timeout_seconds,
    )
    reasoning_client = OpenAIReasoningClient.create(
        api_key=resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    resolver = ProductResolver(product_repository)
    analysis_service = AnalysisService(
        manual_source=ManualIngredientSource(),
        scraper=ProductScraper(page_fetcher),
        resolver=resolver,
        analyzer=AnalyzerService(
            client=reasoning_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        ),
        persister=AnalysisPersister(repository=analysis_repository, resolver=resolver),
        repository=analysis_repository,
    )

    async def close_resources() -> None:
        await page_fetcher.close()
        await reasoning_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
