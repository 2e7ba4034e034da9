"""Provider record shapes and their conversion into :class:`CanonicalReview`.

Every provider payload is first parsed into one of the tagged raw variants
below; :func:`normalize` is the single entry point that turns any variant into
the canonical review. Normalization never raises: malformed optional fields
fall back to defaults.
"""

from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from flex_reviews.core.models import (
    MAX_RATING,
    REVIEW_DIRECTIONS,
    REVIEW_STATUSES,
    CanonicalReview,
    CategoryRating,
    ReviewSource,
)

logger = logging.getLogger(__name__)

HOSTAWAY_CHANNEL = "Hostaway"
PLACES_CHANNEL = "Google"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Synthesized Places ids live above this offset so they cannot meet provider ids.
PLACES_ID_OFFSET = 10**15
PLACES_ID_BITS = 48


@dataclass(slots=True, frozen=True)
class RawCategory:
    category: str
    rating: float


@dataclass(slots=True, frozen=True)
class HostawayRaw:
    id: int
    type: str | None = None
    status: str | None = None
    rating: float | None = None
    public_review: str | None = None
    categories: tuple[RawCategory, ...] = ()
    submitted_at: str | None = None
    guest_name: str | None = None
    listing_name: str | None = None
    channel: str | None = None


@dataclass(slots=True, frozen=True)
class SeedRaw:
    id: int
    type: str
    status: str
    rating: float | None
    public_review: str
    categories: tuple[RawCategory, ...]
    submitted_at: str
    guest_name: str
    listing_name: str
    channel: str | None = None


@dataclass(slots=True, frozen=True)
class PlacesRaw:
    place_id: str
    listing_name: str
    author_name: str | None = None
    rating: float | None = None
    text: str | None = None
    time: int | None = None


RawReview = HostawayRaw | SeedRaw | PlacesRaw


def normalize(raw: RawReview) -> CanonicalReview:
    if isinstance(raw, PlacesRaw):
        return _normalize_places(raw)
    if isinstance(raw, SeedRaw):
        return _normalize_hostaway_shape(raw, source=ReviewSource.SEED)
    return _normalize_hostaway_shape(raw, source=ReviewSource.HOSTAWAY)


def parse_hostaway_review(payload: Any) -> HostawayRaw | None:
    """Parse one upstream review dict; records without an integer id are dropped."""
    if not isinstance(payload, dict):
        return None
    review_id = _as_int(payload.get("id"))
    if review_id is None:
        logger.warning("dropping upstream review without integer id keys=%s", sorted(payload)[:10])
        return None
    return HostawayRaw(
        id=review_id,
        type=_as_text(payload.get("type")),
        status=_as_text(payload.get("status")),
        rating=_as_float(payload.get("rating")),
        public_review=_as_text(payload.get("publicReview")),
        categories=_parse_categories(payload.get("reviewCategory")),
        submitted_at=_as_text(payload.get("submittedAt")),
        guest_name=_as_text(payload.get("guestName")),
        listing_name=_as_text(payload.get("listingName")),
        channel=_as_text(payload.get("channel")),
    )


def parse_places_review(payload: Any, *, place_id: str, listing_name: str) -> PlacesRaw | None:
    if not isinstance(payload, dict):
        return None
    return PlacesRaw(
        place_id=place_id,
        listing_name=listing_name,
        author_name=_as_text(payload.get("author_name")),
        rating=_as_float(payload.get("rating")),
        text=_as_text(payload.get("text")),
        time=_as_int(payload.get("time")),
    )


def synthesize_places_review_id(place_id: str, timestamp: int) -> int:
    digest = hashlib.sha256(f"{place_id}:{timestamp}".encode("utf-8")).digest()
    return PLACES_ID_OFFSET + int.from_bytes(digest[: PLACES_ID_BITS // 8], "big")


def parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _normalize_hostaway_shape(raw: HostawayRaw | SeedRaw, *, source: ReviewSource) -> CanonicalReview:
    direction = raw.type if raw.type in REVIEW_DIRECTIONS else "guest-to-host"
    status = raw.status if raw.status in REVIEW_STATUSES else "pending"
    return CanonicalReview(
        id=raw.id,
        direction=direction,  # type: ignore[arg-type]
        status=status,  # type: ignore[arg-type]
        raw_rating=_clean_rating(raw.rating),
        category_ratings=_canonical_categories(raw.categories),
        submitted_at=parse_timestamp(raw.submitted_at) or EPOCH,
        guest_name=raw.guest_name or "Anonymous",
        listing_name=raw.listing_name or "",
        channel=raw.channel or HOSTAWAY_CHANNEL,
        source=source,
        public_review=raw.public_review or "",
    )


def _normalize_places(raw: PlacesRaw) -> CanonicalReview:
    timestamp = raw.time if raw.time is not None else 0
    submitted_at = datetime.fromtimestamp(timestamp, tz=timezone.utc) if timestamp > 0 else EPOCH
    return CanonicalReview(
        id=synthesize_places_review_id(raw.place_id, timestamp),
        direction="guest-to-host",
        status="published",
        raw_rating=_clean_rating(raw.rating),
        category_ratings=(),
        submitted_at=submitted_at,
        guest_name=raw.author_name or "Anonymous",
        listing_name=raw.listing_name,
        channel=PLACES_CHANNEL,
        source=ReviewSource.PLACES,
        public_review=raw.text or "",
    )


def _canonical_categories(categories: tuple[RawCategory, ...]) -> tuple[CategoryRating, ...]:
    cleaned = [entry for entry in categories if entry.rating >= 0]
    if not cleaned:
        return ()
    # A single score above 5 means the provider rated this review out of 10.
    divisor = 2.0 if any(entry.rating > MAX_RATING for entry in cleaned) else 1.0
    return tuple(
        CategoryRating(category=entry.category, score=min(MAX_RATING, entry.rating / divisor))
        for entry in cleaned
    )


def _parse_categories(value: Any) -> tuple[RawCategory, ...]:
    if not isinstance(value, list):
        return ()
    parsed: list[RawCategory] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        category = _as_text(item.get("category"))
        rating = _as_float(item.get("rating"))
        if category is None or rating is None:
            continue
        parsed.append(RawCategory(category=category, rating=rating))
    return tuple(parsed)


def _clean_rating(value: float | None) -> float | None:
    if value is None or value < 0:
        return None
    return value


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return None
    else:
        return None
    return parsed if math.isfinite(parsed) else None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        # isdigit() alone accepts characters such as superscripts that int() rejects.
        if stripped.isascii() and stripped.isdigit():
            return int(stripped)
    return None
