"""
Permission engine - Role-based access control over a static configuration.

Roles declare "<action>:<scope>" permission strings per resource and may
extend other roles. A check is resolved in two tiers:

Tier 1: CRUD Grant Table
------------------------
    create/read/update/delete with scope "any" or "mine" (possession
    any/own), inheritance resolved by a Casbin RBAC enforcer.

Tier 2: Business Fallback
-------------------------
    Custom actions ("send", "revoke", ...) and business scopes ("assigned",
    "available") are matched verbatim on the role and its ancestors, then
    passed through the scope validator registered for the scope.

Usage:
======

    from pms.core.auth import PermissionService, load_permission_config

    service = PermissionService(load_permission_config("permissions.json"))

    result = await service.check_permission(
        PermissionCheck(role="manager", resource="invitation", action="send", scope="any")
    )

    result = await service.check_user_permission(user, PermissionResource.USER, "update", target)

Extensibility:
=============

Add scope validators:
    @ScopeRegistry.validator("assigned")
    class AssignmentValidator(ScopeValidator):
        ...
"""

# Core types
from .interfaces import (
    CRUD_ACTIONS,
    GrantOutcome,
    PermissionAction,
    PermissionCheck,
    PermissionContext,
    PermissionResource,
    PermissionResult,
    PermissionScope,
    Possession,
    ScopeValidator,
)

# Errors
from .exceptions import PermissionEngineError, PermissionConfigError, GrantQueryError

# Configuration
from .config import PermissionConfig, RoleDefinition, ResourceDefinition, load_permission_config

# Resolution
from .grants import Grant, GrantTable
from .inheritance import has_permission_with_inheritance, inherited_roles

# Registry (for extending with custom scope validators)
from .registry import ScopeRegistry

# Service (main facade)
from .service import PermissionService, extract_resource_id, resolve_scope

# Default implementations (auto-registered)
from .scopes import AssignedScopeValidator

__all__ = [
    # Types
    "CRUD_ACTIONS",
    "GrantOutcome",
    "PermissionAction",
    "PermissionCheck",
    "PermissionContext",
    "PermissionResource",
    "PermissionResult",
    "PermissionScope",
    "Possession",
    "ScopeValidator",
    # Errors
    "PermissionEngineError",
    "PermissionConfigError",
    "GrantQueryError",
    # Configuration
    "PermissionConfig",
    "RoleDefinition",
    "ResourceDefinition",
    "load_permission_config",
    # Resolution
    "Grant",
    "GrantTable",
    "has_permission_with_inheritance",
    "inherited_roles",
    # Registry
    "ScopeRegistry",
    # Service
    "PermissionService",
    "extract_resource_id",
    "resolve_scope",
    # Default implementations
    "AssignedScopeValidator",
]
