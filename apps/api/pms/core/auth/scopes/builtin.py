"""
Built-in scope validators.

Add custom validators by creating a class with the
@ScopeRegistry.validator decorator.
"""

from typing import Any

from ..interfaces import PermissionContext, PermissionScope, ScopeValidator
from ..registry import ScopeRegistry


@ScopeRegistry.validator(PermissionScope.ASSIGNED.value)
class AssignedScopeValidator(ScopeValidator):
    """
    Extension point for "assigned" scope checks.

    Passes whenever it is reached: it does not verify that the resource is
    actually assigned to the requesting user. Replace it (register another
    class under "assigned") to add that rule, e.g. by checking
    ``context.user_id in context.assigned_users``.
    """

    scope = PermissionScope.ASSIGNED.value

    def __init__(self, **kwargs: Any):
        pass

    async def validate(
        self,
        role: str,
        resource: str,
        action: str,
        context: PermissionContext,
    ) -> tuple[bool, str | None]:
        return True, None
