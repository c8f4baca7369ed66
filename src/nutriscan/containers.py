"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutriscan.adapters.openai_analysis_client import OpenAIAnalysisClient
from nutriscan.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutriscan.adapters.supabase_profile_repository import SupabaseProfileRepository
from nutriscan.config import Settings
from nutriscan.services.analysis import AnalysisService
from nutriscan.services.cache import InMemoryCache
from nutriscan.services.products import ProductService
from nutriscan.services.scans import ScanService
from nutriscan.services.session import SessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    product_service: ProductService
    analysis_service: AnalysisService
    scan_service: ScanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_service = SessionService(SupabaseProfileRepository(supabase_client))
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
    )
    product_service = ProductService(
        client=off_client,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.product_cache_ttl_seconds,
    )
    analysis_service = AnalysisService(
        client=OpenAIAnalysisClient.create(resolved_settings.openai_api_key),
        meal_model=resolved_settings.openai_model,
        product_model=resolved_settings.openai_text_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    scan_service = ScanService(
        session_service=session_service,
        product_service=product_service,
        analysis_service=analysis_service,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        product_service=product_service,
        analysis_service=analysis_service,
        scan_service=scan_service,
        close_resources=close_resources,
    )
