from __future__ import annotations

import logging
from typing import Any

import httpx
from opentelemetry import trace

from flex_reviews.core.errors import UpstreamUnavailableError
from flex_reviews.core.telemetry import record_absorbed_error
from flex_reviews.services.cache import TTLCache
from flex_reviews.services.normalization import PlacesRaw, parse_places_review

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PLACES_CACHE_TTL_SECONDS = 24 * 60 * 60


class PlacesConnector:
    """Google Places reviews; responses are cached per place id to stay under rate limits."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        cache: TTLCache[list[dict[str, Any]]] | None = None,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.cache: TTLCache[list[dict[str, Any]]] = cache or TTLCache(PLACES_CACHE_TTL_SECONDS)
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def fetch(self, place_id: str, *, listing_name: str) -> list[PlacesRaw]:
        with tracer.start_as_current_span("connector.places.fetch") as span:
            span.set_attribute("places.place_id", place_id)
            payloads, cache_hit = await self.cache.get_or_fetch(place_id, lambda: self._fetch_reviews(place_id))
            span.set_attribute("places.cache_hit", cache_hit)
            if cache_hit:
                logger.info("using cached place reviews for place_id=%s", place_id)

            raws = (
                parse_places_review(item, place_id=place_id, listing_name=listing_name) for item in payloads or []
            )
            return [raw for raw in raws if raw is not None]

    async def find_place_id(self, address: str, name: str | None = None) -> str | None:
        if not self.api_key:
            logger.warning("Google Places API key not configured; cannot search for place id")
            return None

        query = f"{name}, {address}" if name else address
        try:
            payload = await self._get_json(
                "/findplacefromtext/json",
                {"input": query, "inputtype": "textquery", "fields": "place_id"},
            )
        except UpstreamUnavailableError as exc:
            logger.warning("place search failed for query=%r: %s", query, exc)
            record_absorbed_error(exc, connector="places")
            return None

        candidates = payload.get("candidates")
        if payload.get("status") != "OK" or not isinstance(candidates, list) or not candidates:
            logger.info("place search returned no candidates for query=%r", query)
            return None

        first = candidates[0]
        place_id = first.get("place_id") if isinstance(first, dict) else None
        return place_id if isinstance(place_id, str) and place_id else None

    async def _fetch_reviews(self, place_id: str) -> list[dict[str, Any]] | None:
        if not self.api_key:
            logger.warning("Google Places API key not configured; returning no place reviews")
            return None

        try:
            payload = await self._get_json("/details/json", {"place_id": place_id, "fields": "name,reviews"})
        except UpstreamUnavailableError as exc:
            logger.warning("place details failed for place_id=%s: %s", place_id, exc)
            record_absorbed_error(exc, connector="places")
            return None

        status = payload.get("status")
        if status == "ZERO_RESULTS":
            logger.info("no reviews found for place_id=%s", place_id)
            return []
        if status != "OK":
            logger.warning("Google Places API error status=%s place_id=%s", status or "unknown", place_id)
            return None

        result = payload.get("result")
        reviews = result.get("reviews") if isinstance(result, dict) else None
        items = [item for item in reviews if isinstance(item, dict)] if isinstance(reviews, list) else []
        logger.info("fetched %s place reviews for place_id=%s", len(items), place_id)
        return items

    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        query = {**params, "key": self.api_key or ""}
        try:
            if self._client is not None:
                response = await self._client.get(url, params=query, timeout=self.timeout_seconds)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"{path} unreachable: {exc}") from exc

        if response.status_code != 200:
            raise UpstreamUnavailableError(
                f"{path} answered with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(f"{path} returned a malformed body") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(f"{path} returned a non-object body")
        return payload
