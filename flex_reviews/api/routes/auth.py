from fastapi import APIRouter, Depends, HTTPException, status as http_status

from flex_reviews.core.errors import AuthenticationError
from flex_reviews.schemas.auth import TokenOut
from flex_reviews.services.credentials import get_credential_manager

router = APIRouter()


@router.get("/token", response_model=TokenOut)
async def access_token(credentials=Depends(get_credential_manager)) -> TokenOut:
    try:
        token = await credentials.get_token()
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=http_status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to get access token: {exc}",
        ) from exc
    return TokenOut(access_token=token)
