from app.schemas.generation import GenerationSettings, GenerateImageRequest, GenerateImageResponse
from app.schemas.generated_image import GeneratedImage, GeneratedImageCreate
from app.schemas.user_profile import UserProfile, UserProfileData, OnboardingCompletion
