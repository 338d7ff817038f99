"""
Permission checking dependencies.
"""

from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Request, status

from pms.core.auth import PermissionAction, PermissionResource, PermissionService
from pms.schemas.user import CurrentUser
from .auth import get_current_user


def get_permission_service(request: Request) -> PermissionService:
    """Permission service built at startup."""
    return request.app.state.permission_service


PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]


def require_permission(
    resource: PermissionResource | str,
    action: PermissionAction | str,
    resource_id_param: str | None = None,
) -> Callable:
    """
    Dependency factory for checking the current user's permission.

    The scope is derived from the user and, for "user" resources, from the
    path parameter named by ``resource_id_param``.

    Usage:
    ```python
    @router.patch("/users/{user_id}")
    async def update_user(
        user_id: str,
        user: CurrentUser = Depends(require_permission("user", PermissionAction.UPDATE, "user_id")),
    ):
        ...
    ```
    """

    async def check_permission(
        request: Request,
        current_user: CurrentUser = Depends(get_current_user),
        service: PermissionService = Depends(get_permission_service),
    ) -> CurrentUser:
        resource_data = None
        if resource_id_param:
            resource_data = request.path_params.get(resource_id_param)

        result = await service.check_user_permission(
            current_user,
            resource,
            action,
            resource_data,
        )

        if not result.granted:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=result.reason,
            )

        return await service.populate_user_permissions(current_user)

    return check_permission
