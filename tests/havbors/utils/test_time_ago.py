"""Tests for the Norwegian relative-time and badge helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from havbors.utils.time_ago import format_time_ago, unread_badge_label

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("elapsed", "label"),
    [
        (timedelta(seconds=0), "Akkurat nå"),
        (timedelta(seconds=59), "Akkurat nå"),
        (timedelta(minutes=1), "1 minutt siden"),
        (timedelta(minutes=45), "45 minutter siden"),
        (timedelta(hours=1), "1 time siden"),
        (timedelta(hours=23, minutes=59), "23 timer siden"),
        (timedelta(days=1), "1 dag siden"),
        (timedelta(days=29), "29 dager siden"),
        (timedelta(days=30), "1 måned siden"),
        (timedelta(days=200), "6 måneder siden"),
        (timedelta(days=360), "1 år siden"),
        (timedelta(days=800), "2 år siden"),
    ],
)
def test_format_time_ago_labels(elapsed: timedelta, label: str) -> None:
    assert format_time_ago(NOW - elapsed, now=NOW) == label


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = (NOW - timedelta(hours=3)).replace(tzinfo=None)

    assert format_time_ago(naive, now=NOW) == "3 timer siden"


def test_future_timestamps_read_as_just_now() -> None:
    assert format_time_ago(NOW + timedelta(minutes=5), now=NOW) == "Akkurat nå"


@pytest.mark.parametrize(
    ("count", "label"),
    [(0, None), (1, "1"), (99, "99"), (100, "99+"), (2500, "99+")],
)
def test_unread_badge_label(count: int, label: str | None) -> None:
    assert unread_badge_label(count) == label
