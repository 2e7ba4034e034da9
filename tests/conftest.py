from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from flex_reviews.connectors.seed import SEED_REVIEWS
from flex_reviews.core.models import ListingRecord
from flex_reviews.main import app
from flex_reviews.services.approvals import InMemoryApprovalStore, get_approval_store
from flex_reviews.services.credentials import get_credential_manager
from flex_reviews.services.listings import ListingService, get_listing_service
from flex_reviews.services.normalization import PlacesRaw
from flex_reviews.services.reviews import ReviewService, get_review_service

LISTINGS = [
    ListingRecord(id=101, internal_name="2B E1 - 33 St Clements", city="London"),
    ListingRecord(id=102, internal_name="2B E1 A - 27 St Clements", city="London"),
    ListingRecord(
        id=103,
        public_name="The Putney Apart",
        public_address="1 Putney High St, London",
        bedrooms=2,
        bathrooms=1,
        guests=4,
    ),
]


class FakeReviewsConnector:
    async def fetch(self):
        return list(SEED_REVIEWS)


class FakeListingsConnector:
    def __init__(self, listings: list[ListingRecord]) -> None:
        self.listings = listings

    async def fetch(self) -> list[ListingRecord]:
        return list(self.listings)

    async def fetch_by_id(self, listing_id: int) -> ListingRecord | None:
        return next((listing for listing in self.listings if listing.id == listing_id), None)


class FakePlacesConnector:
    async def fetch(self, place_id: str, *, listing_name: str) -> list[PlacesRaw]:
        return [
            PlacesRaw(
                place_id=place_id,
                listing_name=listing_name,
                author_name="Ana",
                rating=5,
                text="Lovely stay",
                time=1_700_000_000,
            )
        ]

    async def find_place_id(self, address: str, name: str | None = None) -> str | None:
        return "place-1" if "Putney" in address else None


class FakeCredentials:
    async def get_token(self) -> str:
        return "token-1"


@pytest.fixture
def approval_store() -> InMemoryApprovalStore:
    return InMemoryApprovalStore()


@pytest.fixture
def api_client(approval_store: InMemoryApprovalStore) -> TestClient:
    listings_connector = FakeListingsConnector(LISTINGS)
    service = ReviewService(
        reviews_connector=FakeReviewsConnector(),  # type: ignore[arg-type]
        listings_connector=listings_connector,  # type: ignore[arg-type]
        places_connector=FakePlacesConnector(),  # type: ignore[arg-type]
        approvals=approval_store,
    )
    app.dependency_overrides[get_review_service] = lambda: service
    app.dependency_overrides[get_approval_store] = lambda: approval_store
    app.dependency_overrides[get_listing_service] = lambda: ListingService(
        listings_connector=listings_connector  # type: ignore[arg-type]
    )
    app.dependency_overrides[get_credential_manager] = lambda: FakeCredentials()

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
