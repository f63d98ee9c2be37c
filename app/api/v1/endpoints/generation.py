from typing import Optional

from fastapi import APIRouter, Depends

from app.core.dependencies import get_generation_service, get_optional_user, get_profile_store
from app.schemas import generation as schemas_generation
from app.schemas.token import AuthenticatedUser
from app.services.image_generation_service import ImageGenerationService
from app.services.profile_service import ProfileStore

router = APIRouter()

@router.post("/generate-image", response_model=schemas_generation.GenerateImageResponse)
async def generate_image(
    request: schemas_generation.GenerateImageRequest,
    generator: ImageGenerationService = Depends(get_generation_service),
    profiles: ProfileStore = Depends(get_profile_store),
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
):
    # Signed-in users get their brand preferences folded into the prompt
    profile = profiles.get(current_user.id) if current_user else None
    result = await generator.relay(request, profile=profile)
    return schemas_generation.GenerateImageResponse(
        image_url=result.image_url,
        text_content=result.text_content,
        prompt=result.prompt,
    )
