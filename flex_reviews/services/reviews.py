from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache

from flex_reviews.connectors.hostaway import ListingsConnector, ReviewsConnector
from flex_reviews.connectors.places import PlacesConnector
from flex_reviews.connectors.seed import SEED_REVIEWS
from flex_reviews.core.config import get_settings
from flex_reviews.core.errors import NotFoundError, ValidationError
from flex_reviews.core.models import CanonicalReview, ListingRecord
from flex_reviews.services.approvals import ApprovalStore, approval_decisions, get_approval_store
from flex_reviews.services.cache import TTLCache
from flex_reviews.services.credentials import get_credential_manager
from flex_reviews.services.identity import listing_name_matches, resolve_listing
from flex_reviews.services.normalization import normalize
from flex_reviews.services.queries import (
    CategoryIssue,
    PropertyRollup,
    ReviewCriteria,
    ReviewSummary,
    SortBy,
    SortOrder,
    apply_approvals,
    distinct_channels,
    filter_reviews,
    property_rollups,
    public_view,
    query,
    sort_reviews,
    summarize,
    trending_issues,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReviewListing:
    reviews: list[CanonicalReview]
    listings: list[str]
    channels: list[str]


@dataclass(slots=True)
class ReviewStats:
    summary: ReviewSummary
    trending_issues: list[CategoryIssue]
    properties: list[PropertyRollup]


class ReviewService:
    def __init__(
        self,
        *,
        reviews_connector: ReviewsConnector,
        listings_connector: ListingsConnector,
        places_connector: PlacesConnector,
        approvals: ApprovalStore,
    ) -> None:
        self.reviews_connector = reviews_connector
        self.listings_connector = listings_connector
        self.places_connector = places_connector
        self.approvals = approvals

    async def load_reviews(self) -> tuple[list[CanonicalReview], dict[int, bool]]:
        """Normalized reviews joined with approval decisions, plus the decisions themselves."""
        raws = await self.reviews_connector.fetch()
        decisions = await approval_decisions(self.approvals)
        return apply_approvals((normalize(raw) for raw in raws), decisions), decisions

    async def list_reviews(
        self,
        criteria: ReviewCriteria,
        *,
        sort_by: SortBy = "date",
        sort_order: SortOrder = "desc",
    ) -> ReviewListing:
        (reviews, _), listings = await asyncio.gather(self.load_reviews(), self.listings_connector.fetch())
        return ReviewListing(
            reviews=query(reviews, criteria, sort_by=sort_by, sort_order=sort_order),
            listings=sorted(listing.canonical_name for listing in listings if listing.canonical_name),
            channels=distinct_channels(reviews),
        )

    async def review_stats(self, criteria: ReviewCriteria) -> ReviewStats:
        reviews, _ = await self.load_reviews()
        matching = filter_reviews(reviews, criteria)
        return ReviewStats(
            summary=summarize(matching),
            trending_issues=trending_issues(matching),
            properties=property_rollups(matching),
        )

    async def public_reviews(self, listing_name: str | None = None) -> list[CanonicalReview]:
        reviews, decisions = await self.load_reviews()
        visible = public_view(reviews, decisions)

        if listing_name and listing_name.strip():
            candidates = await self._listing_name_candidates(listing_name)
            visible = [review for review in visible if listing_name_matches(review.listing_name, candidates)]
        return sort_reviews(visible, by="date", order="desc")

    async def place_reviews(
        self,
        *,
        place_id: str | None,
        address: str | None,
        listing_name: str | None,
    ) -> list[CanonicalReview]:
        resolved_place_id = place_id
        if not resolved_place_id:
            if not address:
                raise ValidationError("Either placeId or address must be provided")
            resolved_place_id = await self.places_connector.find_place_id(address, listing_name)
            if not resolved_place_id:
                raise NotFoundError("Could not find Google Place ID for the provided address")
            logger.info("resolved place_id=%s for address=%r", resolved_place_id, address)

        raws = await self.places_connector.fetch(resolved_place_id, listing_name=listing_name or "Unknown Property")
        decisions = await approval_decisions(self.approvals)
        return apply_approvals((normalize(raw) for raw in raws), decisions)

    async def _listing_name_candidates(self, listing_name: str) -> list[str]:
        candidates = [listing_name.strip()]
        listings: list[ListingRecord] = await self.listings_connector.fetch()
        listing = resolve_listing(listing_name, listings)
        if listing is not None:
            candidates.extend(listing.names)
        return candidates


@lru_cache
def get_reviews_connector() -> ReviewsConnector:
    settings = get_settings()
    return ReviewsConnector(
        base_url=settings.hostaway_base_url,
        credentials=get_credential_manager(),
        seeds=SEED_REVIEWS if settings.seed_reviews_enabled else (),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


@lru_cache
def get_listings_connector() -> ListingsConnector:
    settings = get_settings()
    return ListingsConnector(
        base_url=settings.hostaway_base_url,
        credentials=get_credential_manager(),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


@lru_cache
def get_places_connector() -> PlacesConnector:
    settings = get_settings()
    return PlacesConnector(
        base_url=settings.google_places_base_url,
        api_key=settings.google_places_api_key,
        cache=TTLCache(settings.places_cache_ttl_seconds),
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def get_review_service() -> ReviewService:
    return ReviewService(
        reviews_connector=get_reviews_connector(),
        listings_connector=get_listings_connector(),
        places_connector=get_places_connector(),
        approvals=get_approval_store(),
    )
