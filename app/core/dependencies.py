from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.auth import identity_provider
from app.core.database import SessionLocal
from app.schemas.token import AuthenticatedUser
from app.services.image_generation_service import ImageGenerationService, get_image_generation_service
from app.services.image_store import ImageStore, get_image_store
from app.services.profile_service import ProfileStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_token(token: str = Depends(oauth2_scheme)) -> str:
    return token

async def get_current_user(token: str = Depends(oauth2_scheme)) -> AuthenticatedUser:
    return identity_provider.current_user(token)

def get_current_image_store(
    db: Session = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ImageStore:
    return get_image_store(db=db, owner_id=current_user.id)

def get_profile_store(db: Session = Depends(get_db)) -> ProfileStore:
    return ProfileStore(db)

def get_generation_service() -> ImageGenerationService:
    return get_image_generation_service()

optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

async def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[AuthenticatedUser]:
    if not token:
        return None
    return identity_provider.current_user(token)
