"""API dependencies."""

from .auth import AuthenticatedUser, get_current_user, get_token_service
from .permissions import PermissionServiceDep, get_permission_service, require_permission

__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "get_token_service",
    "PermissionServiceDep",
    "get_permission_service",
    "require_permission",
]
