"""Pydantic schemas for listings and the paginated feed."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from havbors.db.models import ListingKind


class ListingRef(BaseModel):
    """Tagged reference to one listing: the kind plus the listing id."""

    kind: ListingKind = Field(..., description="Listing kind (job, vessel, market_item)")
    id: str = Field(..., min_length=1, max_length=36, description="Listing identifier")

    model_config = ConfigDict(frozen=True)


class ListingSummary(BaseModel):
    """Card payload rendered by the feed and the favorites grid."""

    id: str
    kind: ListingKind
    title: str
    price: int | None = Field(None, description="Asking price in NOK")
    municipality_name: str | None = None
    featured_image: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class _ListingDetailBase(ListingSummary):
    description: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    company_name: str | None = None
    is_published: bool


class JobListingDetail(_ListingDetailBase):
    kind: Literal["job"] = "job"
    position_title: str | None = None
    application_due: date | None = None
    form_of_employment: str | None = None


class VesselListingDetail(_ListingDetailBase):
    kind: Literal["vessel"] = "vessel"
    vessel_category: str | None = None
    condition: str | None = None


class MarketItemListingDetail(_ListingDetailBase):
    kind: Literal["market_item"] = "market_item"
    market_category: str | None = None
    condition: str | None = None


ListingDetail = Annotated[
    Union[JobListingDetail, VesselListingDetail, MarketItemListingDetail],
    Field(discriminator="kind"),
]

listing_detail_adapter: TypeAdapter[ListingDetail] = TypeAdapter(ListingDetail)


class FeedPage(BaseModel):
    """One offset-based page of the published listings feed."""

    items: list[ListingSummary]
    total: int = Field(..., ge=0, description="Exact number of matching listings")
    page: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1)
    has_more: bool
    next_page: int | None = None
    query: str = Field("", description="Normalized search text used for the page")


LISTING_DETAIL_MODELS: dict[ListingKind, type[_ListingDetailBase]] = {
    ListingKind.JOB: JobListingDetail,
    ListingKind.VESSEL: VesselListingDetail,
    ListingKind.MARKET_ITEM: MarketItemListingDetail,
}
