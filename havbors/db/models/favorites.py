"""SQLAlchemy ORM models for saved listings and the folders that organise them.

A favorite references exactly one listing through the ``(listing_kind,
listing_id)`` pair, so the "one of three foreign keys" shape of the mobile
schema collapses into a single tagged reference.  ``(user_id, listing_id)`` is
unique: saving a listing twice moves the existing row instead of inserting a
second one.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from . import Base, ListingKind, utcnow
from .listings import Listing


class FavoriteFolder(Base):
    """A named grouping of favorites owned by one user."""

    __tablename__ = "favorite_folders"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "name",
            name="uq_favorite_folders_user_name",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(128),
        index=True,
        nullable=False,
        doc=(
            "Opaque identifier for the owning user as forwarded by the"
            " authentication gateway."
        ),
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
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


class Favorite(Base):
    """A user's saved reference to one listing, optionally filed in a folder."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "listing_id",
            name="uq_favorites_user_listing",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    listing_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    listing_id: Mapped[str] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    folder_id: Mapped[int | None] = mapped_column(
        ForeignKey("favorite_folders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Deleting the folder leaves the favorite in place without a folder.",
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

    listing: Mapped[Listing] = relationship(Listing, lazy="raise")

    @property
    def kind(self) -> ListingKind:
        return ListingKind(self.listing_kind)
