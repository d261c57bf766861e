"""Periodic re-evaluation of stored product health ratings."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from health_rating.clock import Clock, utc_now
from health_rating.domain.history import append_history, compute_trends
from health_rating.domain.products import (
    InvalidProductRow,
    ProductRecord,
    RatingUpdate,
    StalenessPolicy,
)
from health_rating.services.cache import CacheStats
from health_rating.services.rating_cache import RatingCache

BATCH_JOB_ID = "health_rating_batch"
SWEEP_JOB_ID = "health_rating_cache_sweep"

_logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Persistence interface for products awaiting re-evaluation."""

    def list_stale_products(
        self, policy: StalenessPolicy, now: datetime, limit: int
    ) -> list[ProductRecord | InvalidProductRow]:
        """Return stale records, least recently evaluated first.

        Rows that cannot be read come back as ``InvalidProductRow`` in their slot.
        """

    def update_rating(self, product_id: str, update: RatingUpdate) -> None:
        """Persist rating fields for a product."""


@dataclass(frozen=True)
class BatchItemSuccess:
    """A product whose rating was written back."""

    product_id: str
    score: float
    rating_changed: bool
    cache_hit: bool
    fallback: bool


@dataclass(frozen=True)
class BatchItemFailure:
    """A product that could not be processed."""

    product_id: str
    error: str


@dataclass(frozen=True)
class BatchReport:
    """Summary of one batch run."""

    started_at: datetime
    finished_at: datetime
    updated_count: int
    error_count: int
    cache_hits: int
    successes: list[BatchItemSuccess]
    failures: list[BatchItemFailure]
    cache_stats: CacheStats
    skipped: bool = False


@dataclass
class BatchUpdateScheduler:
    """Keeps stored ratings fresh by re-rating stale records on an interval."""

    repository: ProductRepository
    rating_cache: RatingCache
    batch_size: int = 50
    interval_hours: float = 6
    sweep_interval_seconds: float = 3600
    significant_change: float = 0.5
    policy: StalenessPolicy = field(default_factory=StalenessPolicy)
    clock: Clock = utc_now
    _scheduler: AsyncIOScheduler | None = field(default=None, init=False, repr=False)
    _in_progress: bool = field(default=False, init=False, repr=False)

    @property
    def in_progress(self) -> bool:
        """Whether a batch run is currently executing."""
        return self._in_progress

    def start(self) -> None:
        """Schedule the batch job (running once immediately) and the cache sweep."""
        if self._scheduler is not None and self._scheduler.running:
            _logger.warning("Batch scheduler already running")
            return
        scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 3600,
            },
        )
        scheduler.add_job(
            self.run_batch,
            trigger=IntervalTrigger(hours=self.interval_hours, timezone="UTC"),
            id=BATCH_JOB_ID,
            name="Health rating batch update",
            next_run_time=utc_now(),
            replace_existing=True,
        )
        scheduler.add_job(
            self.sweep_cache,
            trigger=IntervalTrigger(seconds=self.sweep_interval_seconds, timezone="UTC"),
            id=SWEEP_JOB_ID,
            name="Health rating cache sweep",
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        _logger.info(
            "Batch scheduler started: every %sh, cache sweep every %ss",
            self.interval_hours,
            self.sweep_interval_seconds,
        )

    def stop(self, wait: bool = False) -> None:
        """Shut the scheduler down."""
        if self._scheduler is None or not self._scheduler.running:
            _logger.warning("Batch scheduler not running")
            return
        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        _logger.info("Batch scheduler stopped")

    def get_jobs(self) -> list[dict[str, object]]:
        """Return the scheduled jobs."""
        if self._scheduler is None:
            return []
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time,
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]

    async def sweep_cache(self) -> int:
        """Clear expired cache entries on the event loop that owns the cache."""
        return self.rating_cache.sweep_expired()

    async def run_batch(self) -> BatchReport:
        """Re-rate one batch of stale products; skipped if a run is in flight."""
        if self._in_progress:
            _logger.warning("Health rating batch already in progress, skipping run")
            now = self.clock()
            return BatchReport(
                started_at=now,
                finished_at=now,
                updated_count=0,
                error_count=0,
                cache_hits=0,
                successes=[],
                failures=[],
                cache_stats=self.rating_cache.get_stats(),
                skipped=True,
            )
        self._in_progress = True
        try:
            return await self._run_batch()
        finally:
            self._in_progress = False

    async def _run_batch(self) -> BatchReport:
        started_at = self.clock()
        _logger.info("Starting health rating batch update")
        candidates = await asyncio.to_thread(
            self.repository.list_stale_products,
            self.policy,
            started_at,
            self.batch_size,
        )

        successes: list[BatchItemSuccess] = []
        failures: list[BatchItemFailure] = []
        for record in candidates[: self.batch_size]:
            if isinstance(record, InvalidProductRow):
                _logger.warning(
                    "Skipping unreadable product %s: %s", record.product_id, record.error
                )
                failures.append(
                    BatchItemFailure(product_id=record.product_id, error=record.error)
                )
                continue
            try:
                successes.append(await self._process(record))
            except Exception as exc:
                _logger.exception(
                    "Failed to update health rating for product %s", record.id
                )
                failures.append(BatchItemFailure(product_id=record.id, error=str(exc)))

        finished_at = self.clock()
        report = BatchReport(
            started_at=started_at,
            finished_at=finished_at,
            updated_count=len(successes),
            error_count=len(failures),
            cache_hits=sum(1 for item in successes if item.cache_hit),
            successes=successes,
            failures=failures,
            cache_stats=self.rating_cache.get_stats(),
        )
        _logger.info(
            "Health rating batch completed: %s updated, %s errors, %s cache hits, "
            "duration: %.2fs",
            report.updated_count,
            report.error_count,
            report.cache_hits,
            (finished_at - started_at).total_seconds(),
        )
        return report

    async def _process(self, record: ProductRecord) -> BatchItemSuccess:
        now = self.clock()
        result, cache_hit = self.rating_cache.lookup(record.snapshot)
        previous = record.health_rating
        # Scores carry one decimal; rounding keeps float noise out of the threshold.
        rating_changed = (
            previous is None
            or round(abs(previous - result.score), 2) >= self.significant_change
        )

        history = ()
        trends = None
        if rating_changed:
            reason = (
                "Initial rating"
                if previous is None
                else f"Rating changed from {previous} to {result.score}"
            )
            history = append_history(record.health_history, result.score, reason, now)
            trends = compute_trends(history, result.score, now)

        update = RatingUpdate(
            health_rating=result.score,
            health_analysis=result.analysis,
            health_rating_label=result.rating,
            health_rating_color=result.color,
            confidence=result.confidence,
            data_completeness=result.data_completeness,
            last_fetched=now,
            rating_changed=rating_changed,
            cache_hit=cache_hit,
            last_significant_update=now if rating_changed else None,
            health_history=history,
            health_trends=trends,
        )
        await asyncio.to_thread(self.repository.update_rating, record.id, update)
        return BatchItemSuccess(
            product_id=record.id,
            score=result.score,
            rating_changed=rating_changed,
            cache_hit=cache_hit,
            fallback=result.is_fallback,
        )
