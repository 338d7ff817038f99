"""
Permission routes.

Read-only views over the role configuration for the frontend, plus
explicit checks for tooling.
"""

from fastapi import APIRouter, HTTPException, status

from pms.core.auth import PermissionCheck, PermissionContext
from pms.core.config import settings
from pms.schemas.permission import (
    PermissionCheckRequest,
    PermissionResultResponse,
    PermissionValidateRequest,
    PermissionValidateResponse,
    RolePermissionsResponse,
    UserPermissionsResponse,
)
from pms.api.dependencies import AuthenticatedUser, PermissionServiceDep

router = APIRouter()


@router.get("/me", response_model=UserPermissionsResponse)
async def get_my_permissions(
    current_user: AuthenticatedUser,
    service: PermissionServiceDep,
):
    """Flattened permission list of the current user's role."""
    user = await service.populate_user_permissions(current_user)
    return UserPermissionsResponse(
        sub=user.sub,
        role=user.client.role,
        client_id=user.client.cuid,
        permissions=user.permissions,
    )


@router.get("/roles/{role}", response_model=RolePermissionsResponse)
async def get_role_permissions(
    role: str,
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    """Direct permissions of a role, per resource."""
    if role not in service.get_available_roles():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")

    return RolePermissionsResponse(
        role=role,
        inherits=service.get_role_inheritance(role),
        permissions=service.get_role_permissions(role),
    )


@router.get("/resources", response_model=list[str])
async def list_resources(
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    return service.get_available_resources()


@router.get("/resources/{resource}/actions", response_model=list[str])
async def list_resource_actions(
    resource: str,
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    """Actions of a resource (empty for unknown resources)."""
    return service.get_resource_actions(resource)


@router.get("/scopes", response_model=dict[str, str])
async def list_scopes(
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    """Configured scopes with their descriptions."""
    return service.get_permission_config().scopes


@router.post("/check", response_model=PermissionResultResponse)
async def check_permission(
    data: PermissionCheckRequest,
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    """Run an explicit check. Denials are results, not errors."""
    context = None
    if data.context is not None:
        context = PermissionContext(**data.context.model_dump())

    result = await service.check_permission(
        PermissionCheck(
            role=data.role,
            resource=data.resource,
            action=data.action,
            scope=data.scope or settings.permissions.default_scope,
            context=context,
        )
    )
    return PermissionResultResponse(
        granted=result.granted,
        reason=result.reason,
        attributes=result.attributes,
    )


@router.post("/validate", response_model=PermissionValidateResponse)
async def validate_permission(
    data: PermissionValidateRequest,
    _: AuthenticatedUser,
    service: PermissionServiceDep,
):
    return PermissionValidateResponse(
        permission=data.permission,
        valid=service.is_valid_permission(data.permission),
    )
