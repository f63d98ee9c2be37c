import uuid

from sqlalchemy import Column, String, Text, DateTime, JSON, Index, func
from app.core.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class GeneratedImage(Base):
    __tablename__ = "generated_images"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)
    session_id = Column(String, nullable=True)
    prompt = Column(Text, nullable=False)
    # data: URI or external asset URL
    image_url = Column(Text, nullable=False)
    text_content = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # temperature / outputType / aspectRatio snapshot
    settings = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_generated_images_user_timestamp", "user_id", "timestamp"),
    )
