from typing import Optional

from pydantic import BaseModel, Field


class GenerationSettings(BaseModel):
    temperature: float = 1.0
    output_type: str = Field(default="General", alias="outputType")
    aspect_ratio: str = Field(default="Auto", alias="aspectRatio")

    class Config:
        populate_by_name = True


class GenerateImageRequest(BaseModel):
    # Optional so that a missing prompt is reported by the relay as a 400
    prompt: Optional[str] = None
    temperature: Optional[float] = None
    output_type: Optional[str] = Field(default=None, alias="outputType")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    # data: URI of an optional reference photo
    reference_image: Optional[str] = Field(default=None, alias="referenceImage")

    class Config:
        populate_by_name = True


class GenerateImageResponse(BaseModel):
    image_url: str = Field(alias="imageUrl")
    text_content: Optional[str] = Field(default=None, alias="textContent")
    prompt: str

    class Config:
        populate_by_name = True
