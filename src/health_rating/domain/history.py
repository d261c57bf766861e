"""Health rating history and trend calculations."""

from dataclasses import dataclass
from datetime import datetime, timedelta

HISTORY_RETENTION = timedelta(days=365)


@dataclass(frozen=True)
class HealthHistoryEntry:
    """A rating recorded at a point in time."""

    score: float
    timestamp: datetime
    reason: str


@dataclass(frozen=True)
class HealthTrends:
    """Rolling averages and improvement of a product's rating."""

    avg_score_30_days: float | None
    avg_score_90_days: float | None
    improvement_30_days: float | None
    improvement_90_days: float | None
    last_analyzed: datetime


def append_history(
    history: tuple[HealthHistoryEntry, ...],
    score: float,
    reason: str,
    now: datetime,
) -> tuple[HealthHistoryEntry, ...]:
    """Append a rating and drop entries older than the retention window."""
    cutoff = now - HISTORY_RETENTION
    entries = [*history, HealthHistoryEntry(score=score, timestamp=now, reason=reason)]
    return tuple(entry for entry in entries if entry.timestamp >= cutoff)


def compute_trends(
    history: tuple[HealthHistoryEntry, ...], current_score: float, now: datetime
) -> HealthTrends:
    """Compute 30 and 90 day averages and improvement percentages."""
    avg_30, improvement_30 = _window_stats(history, current_score, now, days=30)
    avg_90, improvement_90 = _window_stats(history, current_score, now, days=90)
    return HealthTrends(
        avg_score_30_days=avg_30,
        avg_score_90_days=avg_90,
        improvement_30_days=improvement_30,
        improvement_90_days=improvement_90,
        last_analyzed=now,
    )


def _window_stats(
    history: tuple[HealthHistoryEntry, ...],
    current_score: float,
    now: datetime,
    days: int,
) -> tuple[float | None, float | None]:
    cutoff = now - timedelta(days=days)
    window = [entry for entry in history if entry.timestamp >= cutoff]
    if not window:
        return None, None
    average = sum(entry.score for entry in window) / len(window)
    oldest = window[0].score
    improvement = (current_score - oldest) / oldest * 100 if oldest else None
    return average, improvement
