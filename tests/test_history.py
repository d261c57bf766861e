"""Tests for rating history and trends."""

from datetime import timedelta

import pytest

from health_rating.domain.history import (
    HealthHistoryEntry,
    append_history,
    compute_trends,
)
from tests.conftest import START


def test_append_history_drops_entries_older_than_a_year() -> None:
    history = (
        HealthHistoryEntry(3.0, START - timedelta(days=400), "Initial rating"),
        HealthHistoryEntry(3.5, START - timedelta(days=100), "Rating changed"),
    )

    updated = append_history(history, 4.0, "Rating changed from 3.5 to 4.0", START)

    assert [entry.score for entry in updated] == [3.5, 4.0]
    assert updated[-1].timestamp == START


def test_trends_over_thirty_and_ninety_days() -> None:
    history = (
        HealthHistoryEntry(2.0, START - timedelta(days=40), "Initial rating"),
        HealthHistoryEntry(3.0, START - timedelta(days=20), "Rating changed"),
        HealthHistoryEntry(4.0, START, "Rating changed"),
    )

    trends = compute_trends(history, 4.0, START)

    assert trends.avg_score_30_days == pytest.approx(3.5)
    assert trends.improvement_30_days == pytest.approx(100 / 3)
    assert trends.avg_score_90_days == pytest.approx(3.0)
    assert trends.improvement_90_days == pytest.approx(100.0)
    assert trends.last_analyzed == START


def test_trends_without_recent_history() -> None:
    history = (HealthHistoryEntry(2.0, START - timedelta(days=200), "Initial rating"),)

    trends = compute_trends(history, 4.0, START)

    assert trends.avg_score_30_days is None
    assert trends.improvement_30_days is None
    assert trends.avg_score_90_days is None
