from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx
from opentelemetry import trace

from flex_reviews.core.errors import AuthenticationError, UpstreamUnavailableError
from flex_reviews.core.models import ListingImage, ListingRecord
from flex_reviews.core.telemetry import record_absorbed_error
from flex_reviews.services.normalization import HostawayRaw, SeedRaw, parse_hostaway_review

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

REVIEW_ENDPOINT_CANDIDATES: tuple[str, ...] = ("/reviews", "/listings/reviews")


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


def merge_with_seed(
    upstream: Sequence[HostawayRaw],
    seeds: Sequence[SeedRaw],
) -> list[HostawayRaw | SeedRaw]:
    """Upstream records followed by every seed whose id the upstream did not supply."""
    upstream_ids = {record.id for record in upstream}
    return [*upstream, *(seed for seed in seeds if seed.id not in upstream_ids)]


class HostawayConnector:
    def __init__(
        self,
        *,
        base_url: str,
        credentials: TokenProvider,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def _get_json(self, path: str, token: str) -> Any:
        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"{url} unreachable: {exc}") from exc

        if response.status_code != 200:
            raise UpstreamUnavailableError(
                f"{url} answered with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(f"{url} returned a malformed body") from exc


class ReviewsConnector(HostawayConnector):
    def __init__(
        self,
        *,
        base_url: str,
        credentials: TokenProvider,
        seeds: Sequence[SeedRaw] = (),
        endpoints: Sequence[str] = REVIEW_ENDPOINT_CANDIDATES,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            credentials=credentials,
            timeout_seconds=timeout_seconds,
            client=client,
        )
        self.seeds = tuple(seeds)
        self.endpoints = tuple(endpoints)

    async def fetch(self) -> list[HostawayRaw | SeedRaw]:
        with tracer.start_as_current_span("connector.reviews.fetch") as span:
            upstream = await self._fetch_upstream()
            merged = merge_with_seed(upstream, self.seeds)
            span.set_attribute("reviews.upstream_count", len(upstream))
            span.set_attribute("reviews.seed_count", len(merged) - len(upstream))
            logger.info(
                "reviews fetched total=%s upstream=%s seed=%s",
                len(merged),
                len(upstream),
                len(merged) - len(upstream),
            )
            return merged

    async def _fetch_upstream(self) -> list[HostawayRaw]:
        try:
            token = await self.credentials.get_token()
        except AuthenticationError as exc:
            logger.warning("reviews connector falling back to seed data: %s", exc)
            record_absorbed_error(exc, connector="reviews")
            return []

        for path in self.endpoints:
            try:
                payload = await self._get_json(path, token)
            except UpstreamUnavailableError as exc:
                if exc.status_code == 404:
                    logger.info("reviews endpoint %s not found; trying next candidate", path)
                else:
                    logger.warning("reviews endpoint %s failed: %s", path, exc)
                    record_absorbed_error(exc, connector="reviews", endpoint=path)
                continue

            records = _success_result(payload)
            if not isinstance(records, list) or not records:
                logger.info("reviews endpoint %s returned no records", path)
                continue

            parsed = [record for record in (parse_hostaway_review(item) for item in records) if record is not None]
            if parsed:
                return parsed
        return []


class ListingsConnector(HostawayConnector):
    async def fetch(self) -> list[ListingRecord]:
        with tracer.start_as_current_span("connector.listings.fetch") as span:
            try:
                token = await self.credentials.get_token()
                payload = await self._get_json("/listings", token)
            except (AuthenticationError, UpstreamUnavailableError) as exc:
                logger.warning("listings fetch failed; serving no listings: %s", exc)
                record_absorbed_error(exc, connector="listings")
                return []

            records = _success_result(payload)
            if not isinstance(records, list):
                logger.warning("listings endpoint returned an unexpected response format")
                return []

            listings = [listing for listing in (parse_listing(item) for item in records) if listing is not None]
            span.set_attribute("listings.count", len(listings))
            logger.info("listings fetched count=%s", len(listings))
            return listings

    async def fetch_by_id(self, listing_id: int) -> ListingRecord | None:
        with tracer.start_as_current_span("connector.listings.fetch_by_id") as span:
            span.set_attribute("listing.id", listing_id)
            try:
                token = await self.credentials.get_token()
                payload = await self._get_json(f"/listings/{listing_id}", token)
            except (AuthenticationError, UpstreamUnavailableError) as exc:
                logger.warning("listing %s fetch failed: %s", listing_id, exc)
                record_absorbed_error(exc, connector="listings")
                return None
            return parse_listing(_success_result(payload))


def parse_listing(payload: Any) -> ListingRecord | None:
    if not isinstance(payload, dict):
        return None
    listing_id = payload.get("id")
    if isinstance(listing_id, bool) or not isinstance(listing_id, int):
        logger.warning("dropping upstream listing without integer id")
        return None

    amenities = frozenset(
        name
        for name in (
            _as_text(item.get("amenityName")) for item in _as_dict_list(payload.get("listingAmenities"))
        )
        if name
    )
    images = sorted(
        (
            ListingImage(
                url=url,
                sort_order=_as_int(item.get("sortOrder")) or 0,
                caption=_as_text(item.get("caption")),
            )
            for item in _as_dict_list(payload.get("listingImages"))
            if (url := _as_text(item.get("url")))
        ),
        key=lambda image: image.sort_order,
    )

    return ListingRecord(
        id=listing_id,
        internal_name=_as_text(payload.get("internalListingName")),
        public_name=_as_text(payload.get("name")),
        external_name=_as_text(payload.get("externalListingName")),
        description=_as_text(payload.get("description")),
        thumbnail_url=_as_text(payload.get("thumbnailUrl")),
        address=_as_text(payload.get("address")),
        public_address=_as_text(payload.get("publicAddress")),
        street=_as_text(payload.get("street")),
        city=_as_text(payload.get("city")),
        country=_as_text(payload.get("country")),
        zipcode=_as_text(payload.get("zipcode")),
        bedrooms=_as_int(payload.get("bedroomsNumber")),
        bathrooms=_as_int(payload.get("bathroomsNumber")),
        guests=_as_int(payload.get("personCapacity")),
        amenities=amenities,
        images=tuple(images),
    )


def _success_result(payload: Any) -> Any:
    if isinstance(payload, dict) and payload.get("status") == "success":
        return payload.get("result")
    return None


def _as_dict_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None
