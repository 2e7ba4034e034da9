from flex_reviews.core.models import ListingImage, ListingRecord
from flex_reviews.services.identity import listing_name_matches, property_details, resolve_listing

LISTINGS = [
    ListingRecord(id=101, internal_name="2B E1 - 33 St Clements"),
    ListingRecord(id=102, internal_name="2B E1 A - 27 St Clements"),
    ListingRecord(id=103, public_name="The Putney Apart", external_name="Putney Apartment by Flex"),
]


def test_numeric_identifier_is_an_id_lookup_only() -> None:
    assert resolve_listing("102", LISTINGS) is LISTINGS[1]
    assert resolve_listing("999", LISTINGS) is None


def test_exact_match_ignores_case() -> None:
    assert resolve_listing("2b e1 - 33 st clements", LISTINGS) is LISTINGS[0]


def test_slug_resolves_through_collapsed_tier() -> None:
    assert resolve_listing("2b-e1-33-st-clements", LISTINGS) is LISTINGS[0]
    assert resolve_listing("2B E1 33 ST Clements", LISTINGS) is LISTINGS[0]


def test_partial_name_falls_back_to_substring_tier() -> None:
    assert resolve_listing("Putney", LISTINGS) is LISTINGS[2]
    assert resolve_listing("27 St Clements", LISTINGS) is LISTINGS[1]


def test_earlier_tier_beats_earlier_listing() -> None:
    listings = [ListingRecord(id=1, internal_name="Clements"), ListingRecord(id=2, internal_name="Clements House")]
    assert resolve_listing("clements house", listings) is listings[1]


def test_empty_identifier_never_matches() -> None:
    assert resolve_listing("", LISTINGS) is None
    assert resolve_listing("   ", LISTINGS) is None


def test_listing_name_matches_skips_empty_names() -> None:
    assert listing_name_matches("The Putney Apart", ["putney"])
    assert not listing_name_matches("", ["putney"])
    assert not listing_name_matches("The Putney Apart", ["", "  "])
    assert not listing_name_matches("The Putney Apart", ["Shoreditch Loft"])


def test_property_details_fill_defaults() -> None:
    details = property_details(ListingRecord(id=7, city="London"))

    assert details == {
        "name": "Property",
        "address": "London",
        "description": "Beautiful property in London.",
        "bedrooms": 0,
        "bathrooms": 1,
        "guests": 2,
        "amenities": ["WiFi", "Kitchen"],
        "images": [],
    }


def test_property_details_prefer_listing_values() -> None:
    listing = ListingRecord(
        id=8,
        public_name="The Putney Apart",
        public_address="1 Putney High St, London",
        bedrooms=2,
        bathrooms=2,
        guests=4,
        amenities=frozenset({"Washer", "Balcony"}),
        images=(ListingImage(url="https://img/1.jpg", sort_order=0), ListingImage(url="https://img/2.jpg", sort_order=1)),
    )
    details = property_details(listing)

    assert details["name"] == "The Putney Apart"
    assert details["address"] == "1 Putney High St, London"
    assert details["amenities"] == ["Balcony", "Washer"]
    assert details["images"] == ["https://img/1.jpg", "https://img/2.jpg"]


def test_non_ascii_digits_are_not_treated_as_ids() -> None:
    assert resolve_listing("²", LISTINGS) is None
