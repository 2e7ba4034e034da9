from __future__ import annotations

import logging

from flex_reviews.connectors.hostaway import ListingsConnector
from flex_reviews.core.errors import NotFoundError
from flex_reviews.core.models import ListingRecord
from flex_reviews.core.slugs import from_slug
from flex_reviews.services.identity import is_numeric_identifier, resolve_listing
from flex_reviews.services.reviews import get_listings_connector

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(self, *, listings_connector: ListingsConnector) -> None:
        self.listings_connector = listings_connector

    async def list_listings(self) -> list[ListingRecord]:
        return await self.listings_connector.fetch()

    async def get_listing(self, identifier: str) -> ListingRecord:
        """Resolve a numeric id, slug or (partial) name; raises NotFoundError when nothing matches."""
        candidate = identifier.strip()
        if not candidate:
            raise NotFoundError("Listing not found")

        listings = await self.listings_connector.fetch()
        if is_numeric_identifier(candidate):
            listing = resolve_listing(candidate, listings)
            if listing is None:
                listing = await self.listings_connector.fetch_by_id(int(candidate))
        else:
            listing = resolve_listing(from_slug(candidate), listings) or resolve_listing(candidate, listings)

        if listing is None:
            logger.info("listing identifier %r did not resolve among %s listings", candidate, len(listings))
            raise NotFoundError("Listing not found")
        return listing


def get_listing_service() -> ListingService:
    return ListingService(listings_connector=get_listings_connector())
