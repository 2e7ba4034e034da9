from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal

from flex_reviews.core.slugs import to_slug

ReviewDirection = Literal["guest-to-host", "host-to-guest"]
ReviewStatus = Literal["published", "pending", "rejected"]

REVIEW_DIRECTIONS: frozenset[str] = frozenset({"guest-to-host", "host-to-guest"})
REVIEW_STATUSES: frozenset[str] = frozenset({"published", "pending", "rejected"})
MAX_RATING = 5.0


class ReviewSource(str, Enum):
    HOSTAWAY = "hostaway"
    SEED = "seed"
    PLACES = "places"


def round_rating(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def to_five_point(score: float) -> float:
    # Scores above 5 come from providers that rate out of 10.
    return score / 2 if score > MAX_RATING else score


@dataclass(slots=True, frozen=True)
class CategoryRating:
    category: str
    score: float


@dataclass(slots=True, frozen=True)
class CanonicalReview:
    id: int
    direction: ReviewDirection
    status: ReviewStatus
    raw_rating: float | None
    category_ratings: tuple[CategoryRating, ...]
    submitted_at: datetime
    guest_name: str
    listing_name: str
    channel: str
    source: ReviewSource
    public_review: str = ""
    approval_state: bool = False

    @property
    def computed_average_rating(self) -> float:
        if self.raw_rating is not None:
            value = to_five_point(self.raw_rating)
        elif self.category_ratings:
            value = sum(entry.score for entry in self.category_ratings) / len(self.category_ratings)
        else:
            value = 0.0
        return min(MAX_RATING, max(0.0, round_rating(value)))


@dataclass(slots=True, frozen=True)
class ListingImage:
    url: str
    sort_order: int
    caption: str | None = None


@dataclass(slots=True, frozen=True)
class ListingRecord:
    id: int
    internal_name: str | None = None
    public_name: str | None = None
    external_name: str | None = None
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
    amenities: frozenset[str] = field(default_factory=frozenset)
    images: tuple[ListingImage, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(name for name in (self.internal_name, self.public_name, self.external_name) if name)

    @property
    def canonical_name(self) -> str:
        names = self.names
        return names[0] if names else ""

    @property
    def slug(self) -> str:
        return to_slug(self.canonical_name)


@dataclass(slots=True)
class ApprovalRecord:
    review_id: int
    listing_name: str
    approved: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True, frozen=True)
class AccessToken:
    value: str
    issued_at: datetime
    expires_at: datetime
