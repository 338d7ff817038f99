"""
Current user schemas.
"""

from pydantic import BaseModel, Field


class ClientContext(BaseModel):
    """The client (tenant account) the user is currently acting in."""
    cuid: str
    role: str
    display_name: str | None = None


class CurrentUser(BaseModel):
    """
    Authenticated user as seen by request handlers.

    `permissions` is derived from the role and filled in by
    PermissionService.populate_user_permissions.
    """
    sub: str
    email: str | None = None
    client: ClientContext
    permissions: list[str] = Field(default_factory=list)
