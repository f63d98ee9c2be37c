from typing import List, Optional

from pydantic import BaseModel, Field


class OnboardingStep(BaseModel):
    index: int
    key: str
    title: str
    subtitle: str
    field: Optional[str] = None
    options: List[str] = Field(default_factory=list)
    multi_select: bool = Field(default=False, alias="multiSelect")

    class Config:
        populate_by_name = True
