from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from flex_reviews.core.models import ListingRecord
from flex_reviews.core.slugs import collapse_name, to_slug

DEFAULT_AMENITIES: tuple[str, ...] = ("WiFi", "Kitchen")


def is_numeric_identifier(value: str) -> bool:
    return value.isascii() and value.isdigit()


def resolve_listing(identifier: str, listings: Sequence[ListingRecord]) -> ListingRecord | None:
    """Map a numeric id, slug, display name or partial name to a listing.

    Numeric identifiers are id lookups only. Anything else is matched against
    the internal, public and external names in three tiers (exact, collapsed,
    substring); the first tier with a hit wins, scanning in provider order.
    """
    candidate = identifier.strip()
    if not candidate:
        return None
    if is_numeric_identifier(candidate):
        listing_id = int(candidate)
        return next((listing for listing in listings if listing.id == listing_id), None)

    for matches in _match_tiers(candidate):
        for listing in listings:
            if any(matches(name) for name in listing.names):
                return listing
    return None


def listing_name_matches(listing_name: str, candidates: Iterable[str]) -> bool:
    """Whether a review's free-text listing name refers to any of ``candidates``."""
    if not listing_name.strip():
        return False
    for candidate in candidates:
        if not candidate.strip():
            continue
        if any(matches(listing_name) for matches in _match_tiers(candidate)):
            return True
    return False


def property_details(listing: ListingRecord) -> dict[str, Any]:
    street_parts = [part for part in (listing.street, listing.city, listing.country) if part]
    address = listing.public_address or listing.address or ", ".join(street_parts) or "Address not available"
    return {
        "name": listing.public_name or listing.canonical_name or "Property",
        "address": address,
        "description": listing.description or f"Beautiful property in {listing.city or 'the area'}.",
        "bedrooms": listing.bedrooms or 0,
        "bathrooms": listing.bathrooms or 1,
        "guests": listing.guests or 2,
        "amenities": sorted(listing.amenities) if listing.amenities else list(DEFAULT_AMENITIES),
        "images": [image.url for image in listing.images],
    }


def _match_tiers(identifier: str) -> tuple[Callable[[str], bool], ...]:
    lowered = identifier.strip().lower()
    collapsed = collapse_name(identifier)
    slug = to_slug(identifier)

    def exact(name: str) -> bool:
        return name.strip().lower() == lowered

    def collapsed_exact(name: str) -> bool:
        # Slug equality also covers punctuation the slug dropped, e.g. apostrophes.
        return collapse_name(name) == collapsed or (bool(slug) and to_slug(name) == slug)

    def contains(name: str) -> bool:
        other = collapse_name(name)
        if not other or not collapsed:
            return False
        return collapsed in other or other in collapsed

    return exact, collapsed_exact, contains
