from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class ListingKind(str, Enum):
    """Discriminator shared by listings and the favorites that point at them."""

    JOB = "job"
    VESSEL = "vessel"
    MARKET_ITEM = "market_item"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


from .listings import JobListing, Listing, MarketItemListing, VesselListing  # noqa: E402
from .favorites import Favorite, FavoriteFolder  # noqa: E402
from .notifications import Notification  # noqa: E402
from .profiles import Profile  # noqa: E402

__all__ = [
    "Base",
    "Favorite",
    "FavoriteFolder",
    "JobListing",
    "Listing",
    "ListingKind",
    "MarketItemListing",
    "Notification",
    "NotificationType",
    "Profile",
    "VesselListing",
    "utcnow",
]
