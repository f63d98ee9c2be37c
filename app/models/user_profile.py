from sqlalchemy import Column, String, Boolean, DateTime, JSON, func
from app.core.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    user_id = Column(String, primary_key=True)

    # Onboarding answers (role, industry, niche, use cases, ...)
    data = Column(JSON, nullable=False, default=dict)
    onboarding_complete = Column(Boolean, default=False, nullable=False)
    skipped = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
