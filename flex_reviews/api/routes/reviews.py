from fastapi import APIRouter, Depends, HTTPException, Query, status as http_status

from flex_reviews.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from flex_reviews.schemas.reviews import (
    ApprovalListOut,
    ApprovalRecordOut,
    ApproveOut,
    ApproveRequest,
    CategoryIssueOut,
    PlaceReviewsOut,
    PropertyRollupOut,
    PublicReviewsOut,
    ReviewDirection,
    ReviewListOut,
    ReviewOut,
    ReviewSortBy,
    ReviewStatsOut,
    ReviewStatus,
    SortDir,
    SummaryOut,
)
from flex_reviews.services.approvals import get_approval_store
from flex_reviews.services.queries import ReviewCriteria, parse_date_bound
from flex_reviews.services.reviews import get_review_service

router = APIRouter()


def review_criteria(
    listing: str | None = Query(default=None, min_length=1),
    channel: str | None = Query(default=None, min_length=1),
    direction: ReviewDirection | None = Query(default=None, alias="type"),
    review_status: ReviewStatus | None = Query(default=None, alias="status"),
    min_rating: float | None = Query(default=None, alias="minRating", ge=0, le=5),
    max_rating: float | None = Query(default=None, alias="maxRating", ge=0, le=5),
    category: str | None = Query(default=None, min_length=1),
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
) -> ReviewCriteria:
    try:
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end_of_day=True)
    except ValidationError as exc:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ReviewCriteria(
        listing=listing,
        channel=channel,
        direction=direction,
        status=review_status,
        min_rating=min_rating,
        max_rating=max_rating,
        category=category,
        start_date=start,
        end_date=end,
    )


@router.get("", response_model=ReviewListOut)
async def list_reviews(
    criteria: ReviewCriteria = Depends(review_criteria),
    sort_by: ReviewSortBy = Query(default="date", alias="sortBy"),
    sort_order: SortDir = Query(default="desc", alias="sortOrder"),
    service=Depends(get_review_service),
) -> ReviewListOut:
    try:
        listing = await service.list_reviews(criteria, sort_by=sort_by, sort_order=sort_order)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ReviewListOut(
        result=[ReviewOut.from_review(review) for review in listing.reviews],
        total=len(listing.reviews),
        listings=listing.listings,
        channels=listing.channels,
    )


@router.get("/stats", response_model=ReviewStatsOut)
async def review_stats(
    criteria: ReviewCriteria = Depends(review_criteria),
    service=Depends(get_review_service),
) -> ReviewStatsOut:
    try:
        stats = await service.review_stats(criteria)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ReviewStatsOut(
        summary=SummaryOut.from_summary(stats.summary),
        trending_issues=[CategoryIssueOut.from_issue(issue) for issue in stats.trending_issues],
        properties=[PropertyRollupOut.from_rollup(rollup) for rollup in stats.properties],
    )


@router.get("/public", response_model=PublicReviewsOut)
async def public_reviews(
    listing_name: str | None = Query(default=None, alias="listingName"),
    service=Depends(get_review_service),
) -> PublicReviewsOut:
    try:
        reviews = await service.public_reviews(listing_name)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return PublicReviewsOut(reviews=[ReviewOut.from_review(review) for review in reviews])


@router.post("/approve", response_model=ApproveOut)
async def approve_review(payload: ApproveRequest, store=Depends(get_approval_store)) -> ApproveOut:
    try:
        await store.upsert(payload.review_id, payload.listing_name, payload.approved)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ApproveOut(success=True)


@router.get("/approvals", response_model=ApprovalListOut)
async def list_approvals(
    approved: bool | None = Query(default=None),
    store=Depends(get_approval_store),
) -> ApprovalListOut:
    try:
        records = await store.list_all(approved=approved)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ApprovalListOut(result=[ApprovalRecordOut.from_record(record) for record in records])


@router.get("/google", response_model=PlaceReviewsOut)
async def place_reviews(
    place_id: str | None = Query(default=None, alias="placeId"),
    address: str | None = Query(default=None),
    listing_name: str | None = Query(default=None, alias="listingName"),
    service=Depends(get_review_service),
) -> PlaceReviewsOut:
    try:
        reviews = await service.place_reviews(place_id=place_id, address=address, listing_name=listing_name)
    except ValidationError as exc:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=http_status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return PlaceReviewsOut(result=[ReviewOut.from_review(review) for review in reviews], total=len(reviews))
