from fastapi import APIRouter, Depends

from app.core.auth import identity_provider
from app.core.dependencies import get_current_user, get_token
from app.schemas.token import AuthenticatedUser, SignOutResponse

router = APIRouter()

@router.get("/me", response_model=AuthenticatedUser)
def read_current_user(current_user: AuthenticatedUser = Depends(get_current_user)):
    return current_user

@router.post("/sign-out", response_model=SignOutResponse)
def sign_out(token: str = Depends(get_token)):
    identity_provider.sign_out(token)
    return SignOutResponse()
