"""
Permission schemas.
"""

from pydantic import BaseModel, Field


class PermissionContextSchema(BaseModel):
    """Optional facts used by scope validators."""
    client_id: str | None = None
    user_id: str | None = None
    resource_id: str | None = None
    resource_owner_id: str | None = None
    assigned_users: list[str] = Field(default_factory=list)


class PermissionCheckRequest(BaseModel):
    """Explicit permission check."""
    role: str = Field(..., min_length=1)
    resource: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    scope: str | None = None
    context: PermissionContextSchema | None = None


class PermissionResultResponse(BaseModel):
    """Permission check result."""
    granted: bool
    reason: str
    attributes: list[str] | None = None


class PermissionValidateRequest(BaseModel):
    permission: str


class PermissionValidateResponse(BaseModel):
    permission: str
    valid: bool


class RolePermissionsResponse(BaseModel):
    """Permissions of a role, per resource."""
    role: str
    inherits: list[str]
    permissions: dict[str, list[str]]


class UserPermissionsResponse(BaseModel):
    """Permissions of the current user."""
    sub: str
    role: str
    client_id: str
    permissions: list[str]
