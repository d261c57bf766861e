"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

import pytest

from health_rating.config import Settings
from health_rating.domain.products import (
    InvalidProductRow,
    ProductRecord,
    ProductSnapshot,
    RatingUpdate,
    StalenessPolicy,
)
from health_rating.services.cache import InMemoryCache
from health_rating.services.engine import HealthRatingEngine
from health_rating.services.rating_cache import RatingCache
from health_rating.services.scheduler import ProductRepository

START = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class InMemoryProductRepository(ProductRepository):
    """In-memory product store applying the staleness predicates in Python."""

    records: dict[str, ProductRecord] = field(default_factory=dict)
    updates: dict[str, RatingUpdate] = field(default_factory=dict)
    fail_ids: set[str] = field(default_factory=set)
    list_calls: int = 0

    def add(self, record: ProductRecord) -> None:
        self.records[record.id] = record

    def list_stale_products(
        self, policy: StalenessPolicy, now: datetime, limit: int
    ) -> list[ProductRecord | InvalidProductRow]:
        self.list_calls += 1
        matching = [
            record for record in self.records.values() if policy.matches(record, now)
        ]
        matching.sort(
            key=lambda record: (
                record.last_fetched is not None,
                record.last_fetched or datetime.min.replace(tzinfo=UTC),
            )
        )
        return matching[:limit]

    def update_rating(self, product_id: str, update: RatingUpdate) -> None:
        if product_id in self.fail_ids:
            raise RuntimeError(f"write rejected for {product_id}")
        current = self.records[product_id]
        self.records[product_id] = replace(
            current,
            health_rating=update.health_rating,
            health_analysis=update.health_analysis,
            last_fetched=update.last_fetched,
            last_significant_update=(
                update.last_significant_update or current.last_significant_update
            ),
            health_history=update.health_history or current.health_history,
        )
        self.updates[product_id] = update


def make_snapshot(product_id: str = "p1", **overrides: object) -> ProductSnapshot:
    """Return a fully populated product snapshot."""
    values: dict[str, object] = {
        "id": product_id,
        "name": "Greek yogurt",
        "category": "Dairy",
        "brand": "Acme",
        "ingredients": "Milk, live cultures, vitamin D",
        "nutriments": {
            "proteins_100g": 9,
            "carbohydrates_100g": 18,
            "fat_100g": 4,
            "sugars_100g": 4,
            "saturated_fat_100g": 2.5,
            "fiber_100g": 0,
        },
        "nutriscore_grade": None,
    }
    values.update(overrides)
    return ProductSnapshot(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> HealthRatingEngine:
    return HealthRatingEngine(clock=clock)


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(max_size=100, clock=clock)


@pytest.fixture
def rating_cache(cache: InMemoryCache, engine: HealthRatingEngine) -> RatingCache:
    return RatingCache(cache=cache, engine=engine)


@pytest.fixture
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()
