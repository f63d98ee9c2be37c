from typing import List

from pydantic import BaseModel, Field


class UserProfileData(BaseModel):
    name: str = ""
    email: str = ""
    role: str = ""
    industry: str = ""
    niche: str = ""
    use_cases: List[str] = Field(default_factory=list, alias="useCases")
    platforms: List[str] = Field(default_factory=list)
    image_types: List[str] = Field(default_factory=list, alias="imageTypes")
    brand_style: List[str] = Field(default_factory=list, alias="brandStyle")
    brand_colors: List[str] = Field(default_factory=list, alias="brandColors")
    goals: List[str] = Field(default_factory=list)
    frequency: str = ""

    class Config:
        populate_by_name = True


class OnboardingCompletion(UserProfileData):
    skipped: bool = False


class UserProfile(UserProfileData):
    skipped: bool = False
    onboarding_complete: bool = Field(default=False, alias="onboardingComplete")
