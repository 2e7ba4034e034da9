from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic.alias_generators import to_camel

from flex_reviews.core.models import ApprovalRecord, CanonicalReview, ReviewDirection, ReviewStatus
from flex_reviews.services.queries import CategoryIssue, PropertyRollup, ReviewSummary

ReviewSortBy = Literal["date", "rating", "listing"]
SortDir = Literal["asc", "desc"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryRatingOut(CamelModel):
    category: str
    score: float


class ReviewOut(CamelModel):
    id: int
    direction: ReviewDirection
    status: ReviewStatus
    raw_rating: float | None = None
    category_ratings: list[CategoryRatingOut] = Field(default_factory=list)
    computed_average_rating: float
    submitted_at: datetime
    guest_name: str
    listing_name: str
    channel: str
    public_review: str = ""
    approval_state: bool = False

    @classmethod
    def from_review(cls, review: CanonicalReview) -> "ReviewOut":
        return cls(
            id=review.id,
            direction=review.direction,
            status=review.status,
            raw_rating=review.raw_rating,
            category_ratings=[
                CategoryRatingOut(category=entry.category, score=entry.score) for entry in review.category_ratings
            ],
            computed_average_rating=review.computed_average_rating,
            submitted_at=review.submitted_at,
            guest_name=review.guest_name,
            listing_name=review.listing_name,
            channel=review.channel,
            public_review=review.public_review,
            approval_state=review.approval_state,
        )


class ReviewListOut(CamelModel):
    status: str = "success"
    result: list[ReviewOut] = Field(default_factory=list)
    total: int
    listings: list[str] = Field(default_factory=list)
    channels: list[str] = Field(default_factory=list)


class PublicReviewsOut(CamelModel):
    reviews: list[ReviewOut] = Field(default_factory=list)


class PlaceReviewsOut(CamelModel):
    status: str = "success"
    result: list[ReviewOut] = Field(default_factory=list)
    total: int


class ApproveRequest(CamelModel):
    review_id: StrictInt
    listing_name: str | None = None
    approved: StrictBool


class ApproveOut(CamelModel):
    success: bool


class ApprovalRecordOut(CamelModel):
    review_id: int
    listing_name: str
    approved: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ApprovalRecord) -> "ApprovalRecordOut":
        return cls(
            review_id=record.review_id,
            listing_name=record.listing_name,
            approved=record.approved,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ApprovalListOut(CamelModel):
    result: list[ApprovalRecordOut] = Field(default_factory=list)


class SummaryOut(CamelModel):
    total: int
    average_rating: float
    approved: int
    pending: int

    @classmethod
    def from_summary(cls, summary: ReviewSummary) -> "SummaryOut":
        return cls(
            total=summary.total,
            average_rating=summary.average_rating,
            approved=summary.approved,
            pending=summary.pending,
        )


class CategoryIssueOut(CamelModel):
    category: str
    average: float
    count: int

    @classmethod
    def from_issue(cls, issue: CategoryIssue) -> "CategoryIssueOut":
        return cls(category=issue.category, average=issue.average, count=issue.count)


class PropertyRollupOut(CamelModel):
    listing_name: str
    total_reviews: int
    average_rating: float
    approved_count: int
    pending_count: int

    @classmethod
    def from_rollup(cls, rollup: PropertyRollup) -> "PropertyRollupOut":
        return cls(
            listing_name=rollup.listing_name,
            total_reviews=rollup.total_reviews,
            average_rating=rollup.average_rating,
            approved_count=rollup.approved_count,
            pending_count=rollup.pending_count,
        )


class ReviewStatsOut(CamelModel):
    status: str = "success"
    summary: SummaryOut
    trending_issues: list[CategoryIssueOut] = Field(default_factory=list)
    properties: list[PropertyRollupOut] = Field(default_factory=list)
