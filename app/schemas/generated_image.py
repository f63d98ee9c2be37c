import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.generation import GenerationSettings


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    # naive timestamps are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


class GeneratedImageBase(BaseModel):
    prompt: str
    image_url: str = Field(alias="imageUrl")
    text_content: Optional[str] = Field(default=None, alias="textContent")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    timestamp: datetime.datetime = Field(default_factory=_utcnow)
    settings: GenerationSettings = Field(default_factory=GenerationSettings)

    class Config:
        populate_by_name = True

    @field_validator('timestamp')
    @classmethod
    def normalize_timestamp(cls, v):
        return as_utc(v)


class GeneratedImageCreate(GeneratedImageBase):
    pass


class GeneratedImage(GeneratedImageBase):
    id: str
