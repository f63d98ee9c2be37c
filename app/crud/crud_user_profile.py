from typing import Optional

from sqlalchemy.orm import Session
from app.models import user_profile as models_user_profile

def get_user_profile(db: Session, user_id: str):
    return db.query(models_user_profile.UserProfile).filter(models_user_profile.UserProfile.user_id == user_id).first()

def upsert_user_profile(
    db: Session,
    user_id: str,
    data: dict,
    onboarding_complete: Optional[bool] = None,
    skipped: Optional[bool] = None,
):
    db_profile = get_user_profile(db, user_id)
    if db_profile is None:
        db_profile = models_user_profile.UserProfile(user_id=user_id, data={})
        db.add(db_profile)
    db_profile.data = data
    if onboarding_complete is not None:
        db_profile.onboarding_complete = onboarding_complete
    if skipped is not None:
        db_profile.skipped = skipped
    db.commit()
    db.refresh(db_profile)
    return db_profile
