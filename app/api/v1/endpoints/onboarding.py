from typing import List

from fastapi import APIRouter, Depends

from app.core.dependencies import get_current_user, get_profile_store
from app.schemas import onboarding as schemas_onboarding
from app.schemas import user_profile as schemas_user_profile
from app.schemas.token import AuthenticatedUser
from app.services import onboarding_service
from app.services.profile_service import ProfileStore

router = APIRouter()

@router.get("/steps", response_model=List[schemas_onboarding.OnboardingStep])
def read_onboarding_steps():
    return onboarding_service.STEPS

@router.post("/complete", response_model=schemas_user_profile.UserProfile)
def complete_onboarding(
    completion: schemas_user_profile.OnboardingCompletion,
    profiles: ProfileStore = Depends(get_profile_store),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    return profiles.mark_complete(current_user.id, completion)
