from fastapi import APIRouter

from flex_reviews.api.routes import auth, health, listings, reviews

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(listings.router, prefix="/listings", tags=["listings"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
