"""Dependency container wiring for the rating worker."""

from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from health_rating.adapters.supabase_product_repository import (
    SupabaseProductRepository,
)
from health_rating.config import Settings
from health_rating.domain.products import StalenessPolicy
from health_rating.services.cache import InMemoryCache
from health_rating.services.engine import HealthRatingEngine
from health_rating.services.rating_cache import RatingCache
from health_rating.services.scheduler import BatchUpdateScheduler, ProductRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    product_repository: ProductRepository
    cache: InMemoryCache
    engine: HealthRatingEngine
    rating_cache: RatingCache
    scheduler: BatchUpdateScheduler


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    product_repository = SupabaseProductRepository(
        supabase_client, table=resolved_settings.products_table
    )
    cache = InMemoryCache(max_size=resolved_settings.cache_max_size)
    engine = HealthRatingEngine()
    rating_cache = RatingCache(
        cache=cache,
        engine=engine,
        ttl_seconds=resolved_settings.rating_cache_ttl_seconds,
    )
    scheduler = BatchUpdateScheduler(
        repository=product_repository,
        rating_cache=rating_cache,
        batch_size=resolved_settings.batch_size,
        interval_hours=resolved_settings.batch_interval_hours,
        sweep_interval_seconds=resolved_settings.cache_sweep_interval_seconds,
        significant_change=resolved_settings.significant_change_threshold,
        policy=StalenessPolicy(
            stale_after=timedelta(hours=resolved_settings.stale_after_hours),
            neutral_recheck_after=timedelta(
                hours=resolved_settings.neutral_recheck_after_hours
            ),
        ),
    )
    return AppContainer(
        settings=resolved_settings,
        product_repository=product_repository,
        cache=cache,
        engine=engine,
        rating_cache=rating_cache,
        scheduler=scheduler,
    )
