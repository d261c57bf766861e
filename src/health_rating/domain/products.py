"""Domain models for stored products and their rating updates."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from health_rating.domain.history import HealthHistoryEntry, HealthTrends

NEUTRAL_RATING = 3.0


@dataclass(frozen=True)
class ProductSnapshot:
    """Read-only product content used as engine input."""

    id: str
    name: str | None = None
    category: str | None = None
    brand: str | None = None
    ingredients: str | list[str] | None = None
    nutriments: dict[str, object] | None = None
    nutriscore_grade: str | None = None

    def summary(self) -> dict[str, object]:
        """Return identifying fields for logs and error context."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "brand": self.brand,
        }


@dataclass(frozen=True)
class ProductRecord:
    """A stored product along with its persisted rating state."""

    snapshot: ProductSnapshot
    health_rating: float | None = None
    health_analysis: tuple[str, ...] = ()
    last_fetched: datetime | None = None
    last_significant_update: datetime | None = None
    health_history: tuple[HealthHistoryEntry, ...] = ()

    @property
    def id(self) -> str:
        """Product identifier."""
        return self.snapshot.id


@dataclass(frozen=True)
class InvalidProductRow:
    """A stored row that could not be read as a product."""

    product_id: str
    error: str


@dataclass(frozen=True)
class StalenessPolicy:
    """Predicates selecting records due for re-evaluation."""

    stale_after: timedelta = timedelta(hours=24)
    neutral_recheck_after: timedelta = timedelta(hours=12)
    neutral_rating: float = NEUTRAL_RATING

    def stale_before(self, now: datetime) -> datetime:
        """Records evaluated before this instant are stale."""
        return now - self.stale_after

    def neutral_recheck_before(self, now: datetime) -> datetime:
        """Unrated or neutral records evaluated before this instant are rechecked."""
        return now - self.neutral_recheck_after

    def matches(self, record: ProductRecord, now: datetime) -> bool:
        """Return whether any staleness predicate holds for the record."""
        last = record.last_fetched
        if last is None or last < self.stale_before(now):
            return True
        unrated = (
            record.health_rating is None or record.health_rating == self.neutral_rating
        )
        if unrated and last < self.neutral_recheck_before(now):
            return True
        return record.health_rating is not None and not record.health_analysis


@dataclass(frozen=True)
class RatingUpdate:
    """Rating fields written back to a product record."""

    health_rating: float
    health_analysis: tuple[str, ...]
    health_rating_label: str
    health_rating_color: str
    confidence: float
    data_completeness: float
    last_fetched: datetime
    rating_changed: bool
    cache_hit: bool
    last_significant_update: datetime | None = None
    health_history: tuple[HealthHistoryEntry, ...] = field(default_factory=tuple)
    health_trends: HealthTrends | None = None

    def to_row(self) -> dict[str, object]:
        """Serialize to a column payload, leaving unchanged fields out."""
        row: dict[str, object] = {
            "health_rating": self.health_rating,
            "health_analysis": list(self.health_analysis),
            "health_rating_label": self.health_rating_label,
            "health_rating_color": self.health_rating_color,
            "confidence": self.confidence,
            "data_completeness": self.data_completeness,
            "last_fetched": self.last_fetched.isoformat(),
            "rating_changed": self.rating_changed,
            "cache_hit": self.cache_hit,
        }
        if self.last_significant_update is not None:
            row["last_significant_update"] = self.last_significant_update.isoformat()
        if self.health_history:
            row["health_history"] = [
                {
                    "score": entry.score,
                    "timestamp": entry.timestamp.isoformat(),
                    "reason": entry.reason,
                }
                for entry in self.health_history
            ]
        if self.health_trends is not None:
            trends = self.health_trends
            row["health_trends"] = {
                "avg_score_30_days": trends.avg_score_30_days,
                "avg_score_90_days": trends.avg_score_90_days,
                "improvement_30_days": trends.improvement_30_days,
                "improvement_90_days": trends.improvement_90_days,
                "last_analyzed": trends.last_analyzed.isoformat(),
            }
        return row
