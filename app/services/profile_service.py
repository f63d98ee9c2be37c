from typing import Optional

from sqlalchemy.orm import Session

from app.crud import crud_user_profile
from app.schemas import user_profile as schemas_user_profile


class ProfileStore:
    """Onboarding profile for each user, passed explicitly to whoever needs it."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_schema(db_profile) -> schemas_user_profile.UserProfile:
        return schemas_user_profile.UserProfile(
            **(db_profile.data or {}),
            skipped=db_profile.skipped,
            onboarding_complete=db_profile.onboarding_complete,
        )

    def get(self, user_id: str) -> Optional[schemas_user_profile.UserProfile]:
        db_profile = crud_user_profile.get_user_profile(self.db, user_id)
        if db_profile is None:
            return None
        return self._to_schema(db_profile)

    def save(self, user_id: str, profile: schemas_user_profile.UserProfileData) -> schemas_user_profile.UserProfile:
        data = schemas_user_profile.UserProfileData(**profile.model_dump()).model_dump(by_alias=True)
        return self._to_schema(crud_user_profile.upsert_user_profile(self.db, user_id, data))

    def mark_complete(self, user_id: str, completion: schemas_user_profile.OnboardingCompletion) -> schemas_user_profile.UserProfile:
        data = schemas_user_profile.UserProfileData(**completion.model_dump(exclude={"skipped"})).model_dump(by_alias=True)
        db_profile = crud_user_profile.upsert_user_profile(
            self.db, user_id, data, onboarding_complete=True, skipped=completion.skipped
        )
        return self._to_schema(db_profile)

    def is_onboarding_complete(self, user_id: str) -> bool:
        db_profile = crud_user_profile.get_user_profile(self.db, user_id)
        return bool(db_profile and db_profile.onboarding_complete)
