from __future__ import annotations

from datetime import datetime, timezone

from flex_reviews.core.models import ReviewSource
from flex_reviews.services.normalization import (
    EPOCH,
    PLACES_ID_OFFSET,
    HostawayRaw,
    PlacesRaw,
    RawCategory,
    SeedRaw,
    normalize,
    parse_hostaway_review,
    parse_places_review,
    parse_timestamp,
)


def _hostaway(**overrides: object) -> HostawayRaw:
    fields: dict[str, object] = {"id": 1, "type": "guest-to-host", "status": "published"}
    fields.update(overrides)
    return HostawayRaw(**fields)  # type: ignore[arg-type]


def test_parse_hostaway_review_maps_upstream_fields() -> None:
    raw = parse_hostaway_review(
        {
            "id": 7453,
            "type": "host-to-guest",
            "status": "published",
            "rating": None,
            "publicReview": "Shane and family are wonderful!",
            "reviewCategory": [
                {"category": "cleanliness", "rating": 10},
                {"category": "communication", "rating": "10"},
                {"category": "broken"},
            ],
            "submittedAt": "2020-08-21 22:45:14",
            "guestName": "Shane Finkelstein",
            "listingName": "2B E1 - 33 St Clements",
        }
    )

    assert raw is not None
    assert raw.id == 7453
    assert raw.rating is None
    assert raw.categories == (
        RawCategory(category="cleanliness", rating=10.0),
        RawCategory(category="communication", rating=10.0),
    )
    assert raw.listing_name == "2B E1 - 33 St Clements"


def test_parse_hostaway_review_drops_records_without_integer_id() -> None:
    assert parse_hostaway_review({"id": "abc", "rating": 4}) is None
    assert parse_hostaway_review({"rating": 4}) is None
    assert parse_hostaway_review(["not", "a", "dict"]) is None


def test_parse_hostaway_review_rejects_boolean_and_non_finite_ratings() -> None:
    assert parse_hostaway_review({"id": 1, "rating": True}).rating is None  # type: ignore[union-attr]
    assert parse_hostaway_review({"id": 1, "rating": "nan"}).rating is None  # type: ignore[union-attr]


def test_normalize_defaults_unknown_direction_status_and_timestamp() -> None:
    review = normalize(_hostaway(type="sideways", status="archived", submitted_at="not a date"))

    assert review.direction == "guest-to-host"
    assert review.status == "pending"
    assert review.submitted_at == EPOCH
    assert review.guest_name == "Anonymous"
    assert review.channel == "Hostaway"
    assert review.source is ReviewSource.HOSTAWAY
    assert review.computed_average_rating == 0.0


def test_raw_rating_wins_over_categories() -> None:
    review = normalize(
        _hostaway(rating=4.5, categories=(RawCategory("cleanliness", 2), RawCategory("value", 2)))
    )
    assert review.computed_average_rating == 4.5


def test_ten_point_raw_rating_is_halved() -> None:
    assert normalize(_hostaway(rating=9)).computed_average_rating == 4.5


def test_category_mean_rounds_half_up() -> None:
    review = normalize(
        _hostaway(
            categories=(
                RawCategory("cleanliness", 4),
                RawCategory("communication", 5),
                RawCategory("location", 4),
                RawCategory("value", 4),
            )
        )
    )
    assert review.computed_average_rating == 4.3


def test_ten_point_categories_are_rescaled_per_review() -> None:
    review = normalize(_hostaway(categories=(RawCategory("cleanliness", 8), RawCategory("value", 3))))

    assert [entry.score for entry in review.category_ratings] == [4.0, 1.5]
    assert review.computed_average_rating == 2.8


def test_seed_review_with_ten_point_categories_stays_in_range() -> None:
    seed = SeedRaw(
        id=7453,
        type="host-to-guest",
        status="published",
        rating=None,
        public_review="",
        categories=(RawCategory("cleanliness", 10), RawCategory("communication", 10)),
        submitted_at="2020-08-21 22:45:14",
        guest_name="Shane Finkelstein",
        listing_name="2B E1 - 33 St Clements",
    )
    review = normalize(seed)

    assert review.source is ReviewSource.SEED
    assert review.computed_average_rating == 5.0
    assert review.submitted_at == datetime(2020, 8, 21, 22, 45, 14, tzinfo=timezone.utc)


def test_parse_timestamp_converts_offsets_to_utc() -> None:
    assert parse_timestamp("2025-01-15T10:30:00+02:00") == datetime(2025, 1, 15, 8, 30, tzinfo=timezone.utc)
    assert parse_timestamp("2025-01-15T10:30:00Z") == datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert parse_timestamp("") is None
    assert parse_timestamp(12345) is None


def test_places_review_gets_stable_synthesized_id() -> None:
    raw = parse_places_review(
        {"author_name": "Ana", "rating": 4, "text": "Lovely", "time": 1_700_000_000},
        place_id="place-1",
        listing_name="The Putney Apart",
    )
    assert raw is not None

    first = normalize(raw)
    second = normalize(raw)
    other = normalize(PlacesRaw(place_id="place-2", listing_name="The Putney Apart", time=1_700_000_000))

    assert first.id == second.id
    assert first.id != other.id
    assert PLACES_ID_OFFSET <= first.id < 2**53
    assert first.channel == "Google"
    assert first.status == "published"
    assert first.source is ReviewSource.PLACES
    assert first.submitted_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)


def test_places_review_without_time_uses_epoch() -> None:
    review = normalize(PlacesRaw(place_id="place-1", listing_name="X"))
    assert review.submitted_at == EPOCH
    assert review.guest_name == "Anonymous"


def test_non_ascii_digit_ids_are_dropped_not_raised() -> None:
    assert parse_hostaway_review({"id": "²"}) is None
    assert parse_hostaway_review({"id": "٣"}) is None
    assert parse_hostaway_review({"id": " 42 "}).id == 42  # type: ignore[union-attr]
