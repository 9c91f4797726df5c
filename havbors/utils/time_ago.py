"""Norwegian relative time labels shown next to notifications."""

from __future__ import annotations

from datetime import UTC, datetime

__all__ = ["format_time_ago", "unread_badge_label"]

BADGE_OVERFLOW_LABEL = "99+"
BADGE_MAX_COUNT = 99


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural} siden"


def format_time_ago(created_at: datetime, *, now: datetime | None = None) -> str:
    """Render ``created_at`` relative to ``now`` ("5 minutter siden").

    Naive datetimes are treated as UTC; SQLite hands them back without tzinfo.
    Months are 30 days and years 12 such months.
    """

    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    reference = now or datetime.now(UTC)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=UTC)

    seconds = int((reference - created_at).total_seconds())
    if seconds < 60:
        return "Akkurat nå"

    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minutt", "minutter")

    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "time", "timer")

    days = hours // 24
    if days < 30:
        return _plural(days, "dag", "dager")

    months = days // 30
    if months < 12:
        return _plural(months, "måned", "måneder")

    return _plural(months // 12, "år", "år")


def unread_badge_label(count: int) -> str | None:
    """Label for the tab badge; ``None`` hides the badge entirely."""

    if count <= 0:
        return None
    if count > BADGE_MAX_COUNT:
        return BADGE_OVERFLOW_LABEL
    return str(count)
