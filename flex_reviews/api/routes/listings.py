from fastapi import APIRouter, Depends, HTTPException, status as http_status

from flex_reviews.core.errors import NotFoundError
from flex_reviews.schemas.listings import ListingDetailEnvelope, ListingDetailOut, ListingListOut, ListingOut
from flex_reviews.services.listings import get_listing_service

router = APIRouter()


@router.get("", response_model=ListingListOut)
async def list_listings(service=Depends(get_listing_service)) -> ListingListOut:
    listings = await service.list_listings()
    return ListingListOut(result=[ListingOut.from_listing(listing) for listing in listings])


@router.get("/{identifier}", response_model=ListingDetailEnvelope)
async def get_listing(identifier: str, service=Depends(get_listing_service)) -> ListingDetailEnvelope:
    try:
        listing = await service.get_listing(identifier)
    except NotFoundError as exc:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ListingDetailEnvelope(result=ListingDetailOut.from_listing(listing))
