from app.models.generated_image import GeneratedImage
from app.models.user_profile import UserProfile
