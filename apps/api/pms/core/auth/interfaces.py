"""
Permission interfaces - Core types and abstractions.

These define the values passed in and out of the permission engine.
Application code depends on these types, never on the grant table
implementation behind them.

    check = PermissionCheck(role="manager", resource="lease", action="read")
    result = await service.check_permission(check)
    if not result.granted:
        ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ============================================================
# VOCABULARY
# ============================================================

class PermissionScope(str, Enum):
    """Qualifier narrowing an action. ANY/MINE map onto CRUD possession."""
    ANY = "any"
    MINE = "mine"
    ASSIGNED = "assigned"
    AVAILABLE = "available"


class PermissionAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"
    SEND = "send"
    RESEND = "resend"
    REVOKE = "revoke"
    SETTINGS = "settings"
    INVITE = "invite"
    REMOVE = "remove"
    ASSIGN = "assign"
    APPROVE = "approve"
    EXPORT = "export"
    ASSIGN_ROLES = "assign_roles"
    MANAGE_USERS = "manage_users"


class PermissionResource(str, Enum):
    CLIENT = "client"
    INVITATION = "invitation"
    LEASE = "lease"
    MAINTENANCE = "maintenance"
    NOTIFICATION = "notification"
    PAYMENT = "payment"
    PROPERTY = "property"
    REPORT = "report"
    USER = "user"
    VENDOR = "vendor"


class Possession(str, Enum):
    """Grant table possession."""
    ANY = "any"
    OWN = "own"


CRUD_ACTIONS = frozenset(
    action.value
    for action in (
        PermissionAction.CREATE,
        PermissionAction.READ,
        PermissionAction.UPDATE,
        PermissionAction.DELETE,
    )
)


def enum_value(item: Any) -> str:
    return item.value if isinstance(item, Enum) else str(item)


# ============================================================
# REQUEST / RESULT
# ============================================================

@dataclass
class PermissionContext:
    """
    Per-call facts about who is asking and about what.

    Only scope validators read this; plain permission matching ignores it.
    """
    client_id: str | None = None
    user_id: str | None = None
    resource_id: str | None = None
    resource_owner_id: str | None = None
    assigned_users: list[str] = field(default_factory=list)


@dataclass
class PermissionCheck:
    """
    A single authorization question: may `role` perform `action` with
    `scope` on `resource`?
    """
    role: str
    resource: str
    action: str
    scope: str = PermissionScope.ANY.value
    context: PermissionContext | None = None

    def __post_init__(self) -> None:
        self.resource = enum_value(self.resource)
        self.action = enum_value(self.action)
        self.scope = enum_value(self.scope) if self.scope else PermissionScope.ANY.value

    @property
    def permission_string(self) -> str:
        """Get the check as an 'action:scope' string."""
        return f"{self.action}:{self.scope}"


@dataclass
class PermissionResult:
    """
    Result of a permission check.

    Attributes:
        granted: Whether the action is permitted
        reason: Human-readable explanation (for logging, not for matching)
        attributes: Grant attributes when the grant table answered
    """
    granted: bool
    reason: str
    attributes: list[str] | None = None

    @classmethod
    def allow(cls, reason: str, attributes: list[str] | None = None) -> "PermissionResult":
        return cls(granted=True, reason=reason, attributes=attributes)

    @classmethod
    def deny(cls, reason: str = "Permission denied") -> "PermissionResult":
        return cls(granted=False, reason=reason)


class GrantOutcome(str, Enum):
    """Answer of the first resolution tier."""
    GRANTED = "granted"
    DENIED = "denied"
    NO_ANSWER = "no_answer"


# ============================================================
# SCOPE VALIDATOR
# ============================================================

class ScopeValidator(ABC):
    """
    Extra business check for one business-only scope.

    Runs after the fallback resolver found the permission string on the
    role (or one of its ancestors) and only when the caller supplied a
    context. Register implementations with ``ScopeRegistry.validator``.
    """

    @property
    @abstractmethod
    def scope(self) -> str:
        """Scope name this validator handles."""
        pass

    @abstractmethod
    async def validate(
        self,
        role: str,
        resource: str,
        action: str,
        context: PermissionContext,
    ) -> tuple[bool, str | None]:
        """
        Validate the scope for this call.

        Returns:
            Tuple of (passed: bool, reason: str | None)
        """
        pass
