"""
Permission service - Main facade for permission checks.

Resolution runs in two tiers:

1. CRUD grant table (create/read/update/delete x any/own, inheritance
   resolved by the grant table). A grant here short-circuits.
2. Business fallback: the verbatim "<action>:<scope>" string looked up on
   the role and its ancestors in the raw configuration, followed by the
   scope validator registered for that scope, if any.

Checks never raise. Unexpected errors deny.

Usage:
    service = PermissionService(load_permission_config(path))
    result = await service.check_user_permission(user, "lease", "read")
    if not result.granted:
        raise HTTPException(status_code=403, detail=result.reason)
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog

from .config import PermissionConfig, load_permission_config
from .grants import Grant, GrantTable, query_possession
from .inheritance import has_permission_with_inheritance, inherited_roles
from .interfaces import (
    GrantOutcome,
    PermissionAction,
    PermissionCheck,
    PermissionContext,
    PermissionResource,
    PermissionResult,
    PermissionScope,
    Possession,
    ScopeValidator,
    enum_value,
)
from .registry import ScopeRegistry

# Import to register built-in scope validators
from . import scopes  # noqa: F401

logger = structlog.get_logger()


# ============================================================
# SCOPE DERIVATION
# ============================================================

def extract_resource_id(resource_data: Any) -> str | None:
    """
    Get the id of a resource payload.

    Accepts a mapping or object carrying ``_id``, ``uid`` or ``id`` (in that
    order), or a bare id value.
    """
    if resource_data is None:
        return None

    if isinstance(resource_data, Mapping):
        for key in ("_id", "uid", "id"):
            value = resource_data.get(key)
            if value:
                return str(value)
        return None

    if isinstance(resource_data, (str, int, UUID)):
        return str(resource_data)

    for attr in ("_id", "uid", "id"):
        value = getattr(resource_data, attr, None)
        if value:
            return str(value)

    return str(resource_data)


def resolve_scope(
    resource: str,
    user_id: str,
    resource_data: Any = None,
) -> str:
    """
    Scope to check for a user acting on a resource.

    - user: "mine" when the target is the user themself, otherwise "any"
    - client: always "mine" (a user acts within exactly one client)
    - anything else: "any"
    """
    resource = enum_value(resource)

    if resource == PermissionResource.USER.value:
        resource_id = extract_resource_id(resource_data)
        if resource_id is not None and resource_id == str(user_id):
            return PermissionScope.MINE.value
        return PermissionScope.ANY.value

    if resource == PermissionResource.CLIENT.value:
        return PermissionScope.MINE.value

    return PermissionScope.ANY.value


# ============================================================
# SERVICE
# ============================================================

class PermissionService:
    """
    Role-based permission checks over a static configuration.

    The configuration and grant table are built once and only read
    afterwards, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        config: PermissionConfig,
        grant_table: GrantTable | None = None,
        scope_validators: Mapping[str, ScopeValidator] | None = None,
    ):
        self.config = config
        self.grant_table = grant_table or GrantTable.from_config(config)
        if scope_validators is None:
            scope_validators = ScopeRegistry.build_validators()
        self.scope_validators = dict(scope_validators)

        logger.debug(
            "PermissionService initialized",
            roles=len(config.roles),
            scope_validators=list(self.scope_validators),
        )

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "PermissionService":
        """
        Build a service from a configuration file.

        Raises:
            PermissionConfigError: If the file is unreadable or invalid
        """
        return cls(load_permission_config(path), **kwargs)

    # ============================================================
    # CHECKS
    # ============================================================

    async def check_permission(self, check: PermissionCheck) -> PermissionResult:
        """
        Decide a single permission check.

        Returns a PermissionResult (does not raise).
        """
        try:
            outcome, grant = self._resolve_grant(check)

            if outcome is GrantOutcome.GRANTED:
                suffix = " (own)" if grant.possession is Possession.OWN else ""
                return PermissionResult.allow(
                    f"Permission granted by grant table{suffix}",
                    attributes=list(grant.attributes),
                )

            return await self._evaluate_fallback(check)
        except Exception:
            logger.exception("Error checking permission", check=repr(check))
            return PermissionResult.deny("Error evaluating permission")

    def _resolve_grant(self, check: PermissionCheck) -> tuple[GrantOutcome, Grant | None]:
        """First tier. Failures are logged and treated as no answer."""
        try:
            grant = self.grant_table.query_grant(
                check.role,
                check.resource,
                check.action,
                query_possession(check.scope),
            )
        except Exception as e:
            logger.warning(
                "Grant table check failed",
                role=check.role,
                resource=check.resource,
                action=check.action,
                scope=check.scope,
                error=str(e),
            )
            return GrantOutcome.NO_ANSWER, None

        if grant is None:
            return GrantOutcome.NO_ANSWER, None
        if grant.granted:
            return GrantOutcome.GRANTED, grant
        return GrantOutcome.DENIED, grant

    async def _evaluate_fallback(self, check: PermissionCheck) -> PermissionResult:
        """Second tier: raw configuration with inheritance, then scope validator."""
        permission = check.permission_string

        if not has_permission_with_inheritance(self.config, check.role, check.resource, permission):
            return PermissionResult.deny(
                f"Role '{check.role}' does not have permission '{permission}' "
                f"on resource '{check.resource}'"
            )

        validator = self.scope_validators.get(check.scope)
        if validator is not None and check.context is not None:
            passed, reason = await validator.validate(
                check.role,
                check.resource,
                check.action,
                check.context,
            )
            if not passed:
                return PermissionResult.deny(reason or f"Scope '{check.scope}' validation failed")

        return PermissionResult.allow(f"Permission '{permission}' granted by role configuration")

    async def check_user_permission(
        self,
        user: Any,
        resource: PermissionResource | str,
        action: PermissionAction | str,
        resource_data: Any = None,
    ) -> PermissionResult:
        """
        Check a permission for the current user, deriving the scope.

        Args:
            user: CurrentUser (or anything with .sub and .client.role/.cuid)
            resource: Resource type being acted upon
            action: Action name
            resource_data: Optional target payload (used for "user" resources)
        """
        try:
            resource = enum_value(resource)
            user_id = str(user.sub)
            scope = resolve_scope(resource, user_id, resource_data)

            context = PermissionContext(client_id=user.client.cuid, user_id=user_id)
            if resource == PermissionResource.USER.value:
                resource_id = extract_resource_id(resource_data)
                if resource_id is not None:
                    context.resource_id = resource_id
                    context.resource_owner_id = resource_id

            check = PermissionCheck(
                role=user.client.role,
                resource=resource,
                action=action,
                scope=scope,
                context=context,
            )
        except Exception:
            logger.exception("Error preparing user permission check", resource=str(resource), action=action)
            return PermissionResult.deny("Error evaluating permission")

        return await self.check_permission(check)

    # ============================================================
    # LISTING
    # ============================================================

    def get_role_permissions(self, role: str) -> dict[str, list[str]]:
        """
        Permission strings per resource for a role.

        Combines the grant table's CRUD grants ("action:any"/"action:mine")
        with the role's raw configured strings, without duplicates.
        Inherited permissions are not included.
        """
        try:
            permissions: dict[str, list[str]] = {}

            for resource, action, possession in self.grant_table.direct_grants(role):
                scope = PermissionScope.MINE if possession is Possession.OWN else PermissionScope.ANY
                _append_unique(permissions.setdefault(resource, []), f"{action}:{scope.value}")

            role_def = self.config.get_role(role)
            if role_def is not None:
                for resource, resource_permissions in role_def.permissions.items():
                    bucket = permissions.setdefault(resource, [])
                    for permission in resource_permissions:
                        _append_unique(bucket, permission)

            return permissions
        except Exception:
            logger.exception("Error getting role permissions", role=role)
            role_def = self.config.get_role(role)
            if role_def is None:
                return {}
            return {resource: list(perms) for resource, perms in role_def.permissions.items()}

    def get_role_inheritance(self, role: str) -> list[str]:
        """Configured ancestors of a role."""
        return inherited_roles(self.config, role)

    def get_available_roles(self) -> list[str]:
        return self.config.role_names

    def get_available_resources(self) -> list[str]:
        return list(self.config.resources.keys())

    def get_resource_actions(self, resource: str) -> list[str]:
        resource_def = self.config.resources.get(enum_value(resource))
        return list(resource_def.actions) if resource_def else []

    def get_available_scopes(self) -> list[str]:
        return self.config.scope_names

    def get_permission_config(self) -> PermissionConfig:
        return self.config

    def is_valid_permission(self, permission: str) -> bool:
        """
        Validate an "action[:scope]" string.

        The action must be non-empty; a scope, when given, must be one of
        the configured scopes.
        """
        parts = permission.split(":")
        action = parts[0]
        scope = parts[1] if len(parts) > 1 else ""

        if not action:
            return False
        if scope and scope not in self.get_available_scopes():
            return False
        return True

    async def populate_user_permissions(self, user: Any) -> Any:
        """
        Attach the flattened permission list for the user's role.

        Besides "action:scope" strings, the list holds "resource:action" and
        "resource:action:scope" forms for clients that key on the resource.
        Best effort: on error the user is returned unchanged.
        """
        try:
            role_permissions = self.get_role_permissions(user.client.role)
            permissions: list[str] = []

            for resource, resource_permissions in role_permissions.items():
                for permission in resource_permissions:
                    permissions.append(permission)

                    action, _, scope = permission.partition(":")
                    if action and resource:
                        permissions.append(f"{resource}:{action}")
                        if scope:
                            permissions.append(f"{resource}:{action}:{scope}")

            user.permissions = list(dict.fromkeys(permissions))
        except Exception:
            logger.exception("Error populating user permissions")

        return user


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)
