"""
Access token service.

Tokens carry the claims the permission engine needs to know who is
asking: the user id (``sub``) and the active client with the user's role
in it.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError

from pms.core.config import settings
from pms.schemas.user import CurrentUser


class InvalidTokenError(Exception):
    """Token is malformed, expired or lacks the required claims."""


class TokenService:
    """Encode and decode access tokens."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expire_minutes: int | None = None,
    ):
        self.secret_key = secret_key or settings.auth.secret_key
        self.algorithm = algorithm or settings.auth.algorithm
        self.expire_minutes = expire_minutes or settings.auth.access_token_expire_minutes

    def create_access_token(self, user: CurrentUser) -> str:
        """Create JWT access token."""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": user.sub,
            "email": user.email,
            "client": user.client.model_dump(exclude_none=True),
            "exp": expire,
            "type": "access",
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> CurrentUser:
        """
        Decode an access token into the current user.

        Raises:
            InvalidTokenError: If the token cannot be used
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError("Invalid token") from e

        if payload.get("type", "access") != "access":
            raise InvalidTokenError("Invalid token type")

        try:
            return CurrentUser(
                sub=payload.get("sub"),
                email=payload.get("email"),
                client=payload.get("client"),
            )
        except ValidationError as e:
            raise InvalidTokenError("Token is missing user claims") from e
