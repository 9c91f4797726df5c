"""SQLAlchemy ORM models for published marketplace listings.

All three listing kinds share one ``listings`` table and are told apart by the
``kind`` discriminator (single-table inheritance).  The feed queries the base
class so a single ordered, paginated statement spans every kind, while detail
views and favorites resolve rows to the concrete subclass automatically.
Clients never write these rows; they are maintained by back-office tooling.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from . import Base, ListingKind, utcnow


def _new_listing_id() -> str:
    return str(uuid.uuid4())


class Listing(Base):
    """Columns shared by every listing kind."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listings_published_created", "is_published", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_new_listing_id
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        doc="Asking price in whole NOK; ``None`` when the seller omits it.",
    )
    municipality_name: Mapped[str | None] = mapped_column(
        String(120),
        nullable=True,
        index=True,
        doc="Locality (kommunenavn) searched alongside the title.",
    )
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    featured_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    image_urls: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        server_default="[]",
    )
    condition: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        doc="Item condition for vessels and market items (new, used, ...).",
    )
    is_published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="0",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __mapper_args__ = {
        "polymorphic_on": "kind",
        "polymorphic_abstract": True,
    }

    @property
    def listing_kind(self) -> ListingKind:
        return ListingKind(self.kind)


class JobListing(Listing):
    """A job posting published by an employer."""

    position_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    application_due: Mapped[date | None] = mapped_column(Date, nullable=True)
    form_of_employment: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ListingKind.JOB.value}


class VesselListing(Listing):
    """A vessel offered for sale."""

    vessel_category: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ListingKind.VESSEL.value}


class MarketItemListing(Listing):
    """Equipment or gear offered on the marketplace exchange."""

    market_category: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ListingKind.MARKET_ITEM.value}
