"""
Authentication dependencies.

Usage:
    from pms.api.dependencies.auth import AuthenticatedUser

    @router.get("/me")
    async def me(user: AuthenticatedUser):
        ...
"""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from pms.schemas.user import CurrentUser
from pms.services.auth import InvalidTokenError, TokenService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_token_service() -> TokenService:
    """Get token service instance."""
    return TokenService()


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException 401: If not authenticated
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = token_service.decode_access_token(token)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    structlog.contextvars.bind_contextvars(user_id=user.sub, client_id=user.client.cuid)
    return user


# Authenticated user (required)
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]
