from typing import Any

from pydantic import Field

from flex_reviews.core.models import ListingRecord
from flex_reviews.schemas.reviews import CamelModel
from flex_reviews.services.identity import property_details


class ListingImageOut(CamelModel):
    url: str
    sort_order: int
    caption: str | None = None


class ListingOut(CamelModel):
    id: int
    internal_name: str | None = None
    public_name: str | None = None
    external_name: str | None = None
    canonical_name: str
    slug: str
    description: str | None = None
    thumbnail_url: str | None = None
    address: str | None = None
    public_address: str | None = None
    street: str | None = None
    city: str | None = None
    country: str | None = None
    zipcode: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    guests: int | None = None
    amenities: list[str] = Field(default_factory=list)
    gallery: list[ListingImageOut] = Field(default_factory=list)

    @classmethod
    def from_listing(cls, listing: ListingRecord) -> "ListingOut":
        return cls(**_listing_fields(listing))


class ListingListOut(CamelModel):
    status: str = "success"
    result: list[ListingOut] = Field(default_factory=list)


class ListingDetailOut(ListingOut):
    name: str
    address: str
    description: str
    bedrooms: int
    bathrooms: int
    guests: int
    images: list[str] = Field(default_factory=list)

    @classmethod
    def from_listing(cls, listing: ListingRecord) -> "ListingDetailOut":
        return cls(**{**_listing_fields(listing), **property_details(listing)})


class ListingDetailEnvelope(CamelModel):
    status: str = "success"
    result: ListingDetailOut


def _listing_fields(listing: ListingRecord) -> dict[str, Any]:
    return {
        "id": listing.id,
        "internal_name": listing.internal_name,
        "public_name": listing.public_name,
        "external_name": listing.external_name,
        "canonical_name": listing.canonical_name,
        "slug": listing.slug,
        "description": listing.description,
        "thumbnail_url": listing.thumbnail_url,
        "address": listing.address,
        "public_address": listing.public_address,
        "street": listing.street,
        "city": listing.city,
        "country": listing.country,
        "zipcode": listing.zipcode,
        "bedrooms": listing.bedrooms,
        "bathrooms": listing.bathrooms,
        "guests": listing.guests,
        "amenities": sorted(listing.amenities),
        "gallery": [
            ListingImageOut(url=image.url, sort_order=image.sort_order, caption=image.caption)
            for image in listing.images
        ],
    }
