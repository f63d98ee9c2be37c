from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user, get_profile_store
from app.schemas import user_profile as schemas_user_profile
from app.schemas.token import AuthenticatedUser
from app.services.profile_service import ProfileStore

router = APIRouter()

@router.get("/", response_model=schemas_user_profile.UserProfile)
def read_profile(
    profiles: ProfileStore = Depends(get_profile_store),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    profile = profiles.get(current_user.id)
    if profile is None:
        # Nothing saved yet: an empty, not-yet-onboarded profile
        return schemas_user_profile.UserProfile(email=current_user.email or "")
    return profile

@router.put("/", response_model=schemas_user_profile.UserProfile)
def update_profile(
    profile: schemas_user_profile.UserProfileData,
    profiles: ProfileStore = Depends(get_profile_store),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    return profiles.save(current_user.id, profile)
