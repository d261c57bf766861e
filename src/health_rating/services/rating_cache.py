"""Health rating cache keyed by a fingerprint of product content."""

import logging
from dataclasses import dataclass

from health_rating.domain.products import ProductSnapshot
from health_rating.domain.rating import AnalysisResult
from health_rating.services.cache import CacheStats, InMemoryCache, generate_key
from health_rating.services.engine import HealthRatingEngine

KEY_METHOD = "healthRating"
RATING_TTL_SECONDS = 24 * 60 * 60

_logger = logging.getLogger(__name__)


def fingerprint_key(product: ProductSnapshot) -> str | None:
    """Derive the cache key from the product's content, not just its id."""
    if not product.id:
        return None
    return generate_key(
        KEY_METHOD,
        {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "nutriments": product.nutriments,
            "ingredients": product.ingredients,
            "nutriscore_grade": product.nutriscore_grade,
        },
    )


@dataclass
class RatingCache:
    """Caches engine results for 24 hours per product fingerprint."""

    cache: InMemoryCache
    engine: HealthRatingEngine
    ttl_seconds: float = RATING_TTL_SECONDS

    def get(self, product: ProductSnapshot) -> AnalysisResult | None:
        """Return a cached rating for this exact product content."""
        cached = self.cache.get(fingerprint_key(product))
        if isinstance(cached, AnalysisResult):
            return cached
        return None

    def set(self, product: ProductSnapshot, result: AnalysisResult) -> None:
        """Store a rating under the product's fingerprint."""
        self.cache.set(fingerprint_key(product), result, ttl_seconds=self.ttl_seconds)

    def invalidate(self, product: ProductSnapshot) -> None:
        """Drop the cached rating for this product content."""
        self.cache.delete(fingerprint_key(product))

    def clear(self) -> int:
        """Drop every cached rating, leaving other cached data intact."""
        return self.cache.delete_prefix(f"{KEY_METHOD}:")

    def lookup(self, product: ProductSnapshot) -> tuple[AnalysisResult, bool]:
        """Return the rating and whether it came from the cache."""
        cached = self.get(product)
        if cached is not None:
            return cached, True
        result = self.engine.compute(product)
        if not result.is_fallback:
            self.set(product, result)
        return result, False

    def compute(self, product: ProductSnapshot) -> AnalysisResult:
        """Return the rating, computing and caching it on a miss."""
        result, _ = self.lookup(product)
        return result

    def sweep_expired(self) -> int:
        """Remove expired entries and report how many were cleared."""
        cleared = self.cache.sweep_expired()
        _logger.info("Cache cleanup: cleared %s expired entries", cleared)
        return cleared

    def get_stats(self) -> CacheStats:
        """Return statistics for the underlying cache."""
        return self.cache.get_stats()
