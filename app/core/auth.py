"""
Identity provider for bearer tokens issued by the external auth service.

The frontend signs in against the hosted auth provider and forwards the
resulting HS256 access token. The backend only needs the opaque user id
(``sub``) to scope generated images and profiles.
"""
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Set

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.core.config import settings
from app.schemas.token import AuthenticatedUser

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[AuthenticatedUser]], None]


def create_access_token(user_id: str, email: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": user_id, "exp": expire}
    if email:
        to_encode["email"] = email
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


class IdentityProvider:
    """Resolves the current user from a token and tracks sign-outs."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", audience: Optional[str] = None):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.audience = audience
        self._revoked: Set[str] = set()
        self._listeners: List[AuthListener] = []

    @staticmethod
    def _fingerprint(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def current_user(self, token: str) -> AuthenticatedUser:
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
        if not token or self._fingerprint(token) in self._revoked:
            raise credentials_exception
        try:
            options = {"verify_aud": self.audience is not None}
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options=options,
            )
        except JWTError:
            raise credentials_exception

        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return AuthenticatedUser(id=str(user_id), email=payload.get("email"))

    def on_auth_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, token: str) -> AuthenticatedUser:
        user = self.current_user(token)
        self._notify(user)
        return user

    def sign_out(self, token: str) -> None:
        user = self.current_user(token)
        self._revoked.add(self._fingerprint(token))
        logger.info("User %s signed out", user.id)
        self._notify(None)

    def _notify(self, user: Optional[AuthenticatedUser]) -> None:
        for listener in list(self._listeners):
            listener(user)


identity_provider = IdentityProvider(
    secret_key=settings.SECRET_KEY,
    algorithm=settings.ALGORITHM,
    audience=settings.JWT_AUDIENCE,
)
