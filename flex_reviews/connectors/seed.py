from flex_reviews.services.normalization import RawCategory, SeedRaw


def _categories(**scores: float) -> tuple[RawCategory, ...]:
    return tuple(RawCategory(category=name, rating=score) for name, score in scores.items())


SEED_REVIEWS: tuple[SeedRaw, ...] = (
    SeedRaw(
        id=7453,
        type="host-to-guest",
        status="published",
        rating=None,
        public_review="Shane and family are wonderful! Would definitely host again :)",
        categories=_categories(cleanliness=10, communication=10, respect_house_rules=10),
        submitted_at="2020-08-21 22:45:14",
        guest_name="Shane Finkelstein",
        listing_name="2B E1 - 33 St Clements",
        channel="Hostaway",
    ),
    SeedRaw(
        id=7454,
        type="guest-to-host",
        status="published",
        rating=4.5,
        public_review=(
            "Great location and clean apartment. The host was very responsive and helpful. Would recommend!"
        ),
        categories=_categories(cleanliness=5, communication=5, location=4, value=4),
        submitted_at="2025-01-15 10:30:00",
        guest_name="Sarah Johnson",
        listing_name="2B E1 - 33 St Clements",
        channel="Hostaway",
    ),
    SeedRaw(
        id=7455,
        type="guest-to-host",
        status="published",
        rating=5,
        public_review=(
            "Absolutely fantastic stay! The apartment was spotless and had everything we needed. "
            "Perfect location in the heart of London."
        ),
        categories=_categories(cleanliness=5, communication=5, location=5, value=5),
        submitted_at="2025-02-20 14:15:00",
        guest_name="Michael Chen",
        listing_name="2B E1 A - 27 St Clements",
        channel="Hostaway",
    ),
    SeedRaw(
        id=7456,
        type="guest-to-host",
        status="published",
        rating=4,
        public_review=(
            "Nice place with good amenities. The check-in process was smooth. "
            "Only minor issue was the WiFi speed, but overall a good experience."
        ),
        categories=_categories(cleanliness=4, communication=5, location=4, value=4),
        submitted_at="2025-03-10 09:00:00",
        guest_name="Emma Williams",
        listing_name="2B E1 A - 3 St Clements",
        channel="Hostaway",
    ),
    SeedRaw(
        id=7457,
        type="guest-to-host",
        status="published",
        rating=4.8,
        public_review=(
            "Excellent apartment in a great neighborhood. "
            "The host was very accommodating and the place was exactly as described."
        ),
        categories=_categories(cleanliness=5, communication=5, location=5, value=4),
        submitted_at="2025-04-05 16:45:00",
        guest_name="David Brown",
        listing_name="2B E1 A - 3 St Clements",
        channel="Hostaway",
    ),
    SeedRaw(
        id=10001,
        type="guest-to-host",
        status="published",
        rating=5,
        public_review=(
            "Absolutely fantastic stay! The Putney Apart was spotless, beautifully furnished, and in a perfect "
            "location. The host was incredibly responsive and helpful throughout our stay."
        ),
        categories=_categories(cleanliness=5, communication=5, location=5, value=5),
        submitted_at="2025-09-28 11:00:00",
        guest_name="Sarah Mitchell",
        listing_name="The Putney Apart",
        channel="Hostaway",
    ),
    SeedRaw(
        id=10002,
        type="guest-to-host",
        status="published",
        rating=4.8,
        public_review=(
            "Wonderful apartment with great amenities. Close to transport and local shops, "
            "very clean and well-maintained."
        ),
        categories=_categories(cleanliness=5, communication=5, location=5, value=4),
        submitted_at="2025-09-21 15:30:00",
        guest_name="James Anderson",
        listing_name="The Putney Apart",
        channel="Hostaway",
    ),
    SeedRaw(
        id=10003,
        type="guest-to-host",
        status="published",
        rating=4.5,
        public_review=(
            "Modern and comfortable. Check-in was smooth and communication was excellent. "
            "Plenty of restaurants nearby."
        ),
        categories=_categories(cleanliness=4, communication=5, location=5, value=4),
        submitted_at="2025-09-13 09:45:00",
        guest_name="Emily Thompson",
        listing_name="The Putney Apart",
        channel="Hostaway",
    ),
    SeedRaw(
        id=10004,
        type="guest-to-host",
        status="published",
        rating=5,
        public_review=(
            "Exceeded our expectations. Clean, well-organized and easy access to central London."
        ),
        categories=_categories(cleanliness=5, communication=5, location=5, value=5),
        submitted_at="2025-09-03 18:20:00",
        guest_name="Robert Martinez",
        listing_name="The Putney Apart",
        channel="Hostaway",
    ),
    SeedRaw(
        id=10005,
        type="guest-to-host",
        status="pending",
        rating=4.7,
        public_review="Lovely apartment with a great view. Quiet and safe neighbourhood.",
        categories=_categories(cleanliness=5, communication=5, location=4, value=5),
        submitted_at="2025-08-19 12:10:00",
        guest_name="Lisa Chen",
        listing_name="The Putney Apart",
        channel="Hostaway",
    ),
)
