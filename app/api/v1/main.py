from fastapi import APIRouter

from app.api.v1.endpoints import auth, generation, images, onboarding, profile


api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(generation.router, tags=["generation"])
api_router.include_router(images.router, prefix="/images", tags=["images"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["onboarding"])
