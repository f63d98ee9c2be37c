from typing import Optional

from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    id: str
    email: Optional[str] = None


class SignOutResponse(BaseModel):
    success: bool = True
