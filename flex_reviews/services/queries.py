from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, time, timezone
from typing import Literal

from flex_reviews.core.errors import ValidationError
from flex_reviews.core.models import CanonicalReview, ReviewSource, round_rating
from flex_reviews.services.normalization import parse_timestamp

SortBy = Literal["date", "rating", "listing"]
SortOrder = Literal["asc", "desc"]

TRENDING_ISSUES_LIMIT = 3

# Sources whose reviews are visible until a moderator says otherwise.
AUTO_APPROVED_SOURCES: frozenset[ReviewSource] = frozenset({ReviewSource.PLACES})


@dataclass(slots=True, frozen=True)
class ReviewCriteria:
    listing: str | None = None
    channel: str | None = None
    direction: str | None = None
    status: str | None = None
    min_rating: float | None = None
    max_rating: float | None = None
    category: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(slots=True, frozen=True)
class ReviewSummary:
    total: int
    average_rating: float
    approved: int
    pending: int


@dataclass(slots=True, frozen=True)
class CategoryIssue:
    category: str
    average: float
    count: int


@dataclass(slots=True, frozen=True)
class PropertyRollup:
    listing_name: str
    total_reviews: int
    average_rating: float
    approved_count: int
    pending_count: int


def parse_date_bound(value: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse a date filter bound; an end bound covers the whole of its day."""
    if value is None or not value.strip():
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValidationError(f"invalid date: {value!r}")
    if end_of_day:
        return datetime.combine(parsed.date(), time.max, tzinfo=timezone.utc)
    return parsed


def matches_criteria(review: CanonicalReview, criteria: ReviewCriteria) -> bool:
    rating = review.computed_average_rating
    checks = (
        criteria.listing is None or review.listing_name == criteria.listing,
        criteria.channel is None or review.channel == criteria.channel,
        criteria.direction is None or review.direction == criteria.direction,
        criteria.status is None or review.status == criteria.status,
        criteria.min_rating is None or rating >= criteria.min_rating,
        criteria.max_rating is None or rating <= criteria.max_rating,
        criteria.category is None
        or any(entry.category == criteria.category for entry in review.category_ratings),
        criteria.start_date is None or review.submitted_at >= criteria.start_date,
        criteria.end_date is None or review.submitted_at <= criteria.end_date,
    )
    return all(checks)


def filter_reviews(reviews: Iterable[CanonicalReview], criteria: ReviewCriteria) -> list[CanonicalReview]:
    return [review for review in reviews if matches_criteria(review, criteria)]


def sort_reviews(
    reviews: Iterable[CanonicalReview],
    *,
    by: SortBy = "date",
    order: SortOrder = "desc",
) -> list[CanonicalReview]:
    """Stable sort; equal keys keep their input order in both directions."""
    if by == "rating":
        key = _rating_key
    elif by == "listing":
        key = _listing_key
    else:
        key = _date_key
    return sorted(reviews, key=key, reverse=order == "desc")


def query(
    reviews: Iterable[CanonicalReview],
    criteria: ReviewCriteria,
    *,
    sort_by: SortBy = "date",
    sort_order: SortOrder = "desc",
) -> list[CanonicalReview]:
    return sort_reviews(filter_reviews(reviews, criteria), by=sort_by, order=sort_order)


def summarize(reviews: Sequence[CanonicalReview]) -> ReviewSummary:
    total = len(reviews)
    average = sum(review.computed_average_rating for review in reviews) / total if total else 0.0
    return ReviewSummary(
        total=total,
        average_rating=round_rating(average),
        approved=sum(1 for review in reviews if review.approval_state),
        pending=sum(1 for review in reviews if review.status == "pending"),
    )


def trending_issues(reviews: Iterable[CanonicalReview], limit: int = TRENDING_ISSUES_LIMIT) -> list[CategoryIssue]:
    """Lowest-scoring categories first; ties keep first-seen category order."""
    totals: dict[str, list[float]] = {}
    for review in reviews:
        for entry in review.category_ratings:
            bucket = totals.setdefault(entry.category, [0.0, 0])
            bucket[0] += entry.score
            bucket[1] += 1

    ranked = sorted(totals.items(), key=lambda item: item[1][0] / item[1][1])
    return [
        CategoryIssue(category=category, average=round_rating(score_sum / count), count=int(count))
        for category, (score_sum, count) in ranked[: max(0, limit)]
    ]


def property_rollups(reviews: Iterable[CanonicalReview]) -> list[PropertyRollup]:
    groups: dict[str, list[CanonicalReview]] = {}
    for review in reviews:
        groups.setdefault(review.listing_name, []).append(review)

    rollups = []
    for listing_name, members in groups.items():
        summary = summarize(members)
        rollups.append(
            PropertyRollup(
                listing_name=listing_name,
                total_reviews=summary.total,
                average_rating=summary.average_rating,
                approved_count=summary.approved,
                pending_count=summary.pending,
            )
        )
    return sorted(rollups, key=lambda rollup: rollup.average_rating, reverse=True)


def default_approval(review: CanonicalReview) -> bool:
    return review.source in AUTO_APPROVED_SOURCES


def apply_approvals(reviews: Iterable[CanonicalReview], decisions: Mapping[int, bool]) -> list[CanonicalReview]:
    return [
        replace(review, approval_state=decisions.get(review.id, default_approval(review)))
        for review in reviews
    ]


def public_view(reviews: Iterable[CanonicalReview], decisions: Mapping[int, bool]) -> list[CanonicalReview]:
    """Published reviews; once any decision exists, only explicitly approved ones."""
    published = [review for review in reviews if review.status == "published"]
    if not decisions:
        return published
    return [review for review in published if decisions.get(review.id) is True]


def distinct_channels(reviews: Iterable[CanonicalReview]) -> list[str]:
    return sorted({review.channel for review in reviews})


def _date_key(review: CanonicalReview) -> datetime:
    return review.submitted_at


def _rating_key(review: CanonicalReview) -> float:
    return review.computed_average_rating


def _listing_key(review: CanonicalReview) -> tuple[str, str]:
    return review.listing_name.casefold(), review.listing_name
