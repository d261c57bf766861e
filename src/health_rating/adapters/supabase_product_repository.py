"""Supabase repository for products awaiting health rating updates."""

import logging
from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from health_rating.domain.history import HealthHistoryEntry
from health_rating.domain.products import (
    InvalidProductRow,
    ProductRecord,
    ProductSnapshot,
    RatingUpdate,
    StalenessPolicy,
)
from health_rating.services.nutrients import parse_number
from health_rating.services.scheduler import ProductRepository

PRODUCT_COLUMNS = (
    "id, name, category, brand, ingredients, nutriments, nutriscore_grade, "
    "health_rating, health_analysis, last_fetched, last_significant_update, "
    "health_history"
)

_logger = logging.getLogger(__name__)


def staleness_filter(policy: StalenessPolicy, now: datetime) -> str:
    """Build a PostgREST ``or`` filter matching any staleness predicate."""
    stale_before = _quote(policy.stale_before(now).isoformat())
    recheck_before = _quote(policy.neutral_recheck_before(now).isoformat())
    neutral = policy.neutral_rating
    return ",".join(
        [
            "last_fetched.is.null",
            f"last_fetched.lt.{stale_before}",
            f"and(last_fetched.lt.{recheck_before},"
            f"or(health_rating.is.null,health_rating.eq.{neutral}))",
            "and(health_rating.not.is.null,"
            "or(health_analysis.is.null,health_analysis.eq.{}))",
        ]
    )


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase-backed store of product ratings."""

    client: Client
    table: str = "products"

    def list_stale_products(
        self, policy: StalenessPolicy, now: datetime, limit: int
    ) -> list[ProductRecord | InvalidProductRow]:
        """Return stale products, least recently evaluated first."""
        response = (
            self.client.table(self.table)
            .select(PRODUCT_COLUMNS)
            .or_(staleness_filter(policy, now))
            .order("last_fetched", desc=False, nullsfirst=True)
            .limit(limit)
            .execute()
        )
        return [_read_row(row) for row in response.data or []]

    def update_rating(self, product_id: str, update: RatingUpdate) -> None:
        """Write rating fields for a product."""
        response = (
            self.client.table(self.table)
            .update(update.to_row())
            .eq("id", product_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update health rating for {product_id}")


def _quote(value: str) -> str:
    return f'"{value}"'


def _read_row(row: dict[str, object]) -> ProductRecord | InvalidProductRow:
    try:
        return _parse_product(row)
    except (KeyError, TypeError, ValueError) as exc:
        product_id = str(row.get("id") or "")
        _logger.warning("Unreadable product row %s: %s", product_id, exc)
        return InvalidProductRow(
            product_id=product_id, error=f"Unreadable product row: {exc!r}"
        )


def _parse_datetime(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _parse_history(raw: object) -> tuple[HealthHistoryEntry, ...]:
    if not isinstance(raw, list):
        return ()
    entries = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        timestamp = _parse_datetime(item.get("timestamp"))
        score = parse_number(item.get("score"))
        if timestamp is None or score is None:
            continue
        entries.append(
            HealthHistoryEntry(
                score=score,
                timestamp=timestamp,
                reason=str(item.get("reason") or ""),
            )
        )
    return tuple(entries)


def _parse_product(row: dict[str, object]) -> ProductRecord:
    """Parse a product row into a domain record, dropping unusable fields."""
    product_id = row["id"]
    if not product_id:
        raise ValueError("missing product id")
    nutriments = row.get("nutriments")
    ingredients = row.get("ingredients")
    analysis = row.get("health_analysis")
    snapshot = ProductSnapshot(
        id=str(product_id),
        name=_optional_text(row.get("name")),
        category=_optional_text(row.get("category")),
        brand=_optional_text(row.get("brand")),
        ingredients=ingredients if isinstance(ingredients, str | list) else None,
        nutriments=nutriments if isinstance(nutriments, dict) and nutriments else None,
        nutriscore_grade=_optional_text(row.get("nutriscore_grade")),
    )
    return ProductRecord(
        snapshot=snapshot,
        health_rating=parse_number(row.get("health_rating")),
        health_analysis=(
            tuple(str(line) for line in analysis) if isinstance(analysis, list) else ()
        ),
        last_fetched=_parse_datetime(row.get("last_fetched")),
        last_significant_update=_parse_datetime(row.get("last_significant_update")),
        health_history=_parse_history(row.get("health_history")),
    )


def _optional_text(raw: object) -> str | None:
    return str(raw) if raw is not None else None
