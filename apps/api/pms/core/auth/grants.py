"""
CRUD grant table.

Mirrors a "who can create/read/update/delete what, with which possession
(any/own)" model on top of a Casbin RBAC enforcer:

- policy   p = role, resource, action, possession
- grouping g = child role, parent role   (from ``$extend``)

Only the four CRUD actions are registered. Custom actions ("send",
"revoke", "settings", ...) are skipped here and answered by the
inheritance-aware fallback resolver instead.

Usage:
    table = GrantTable.from_config(config)
    grant = table.query_grant("manager", "lease", "read", Possession.OWN)
    if grant is None:
        ...  # no answer, fall back
"""

from dataclasses import dataclass, field

import casbin
import structlog

from .config import PermissionConfig
from .exceptions import GrantQueryError
from .interfaces import CRUD_ACTIONS, Possession, PermissionScope

logger = structlog.get_logger()

# Depth casbin follows role links by default; raised to the role count so
# every $extend chain resolves. Cycles stay bounded by the same limit.
MIN_HIERARCHY_LEVEL = 10


# An "any" grant also satisfies an "own" query.
GRANT_MODEL = """
[request_definition]
r = sub, obj, act, poss

[policy_definition]
p = sub, obj, act, poss

[role_definition]
g = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act && (r.poss == p.poss || p.poss == "any")
"""


def scope_to_possession(scope: str) -> Possession:
    """Possession used when registering a grant: mine -> own, anything else -> any."""
    return Possession.OWN if scope == PermissionScope.MINE.value else Possession.ANY


def query_possession(scope: str) -> Possession | None:
    """Possession used when querying; business-only scopes have none."""
    if scope == PermissionScope.ANY.value:
        return Possession.ANY
    if scope == PermissionScope.MINE.value:
        return Possession.OWN
    return None


@dataclass
class Grant:
    """Answer from the grant table for one (role, resource, action, possession)."""
    role: str
    resource: str
    action: str
    possession: Possession
    granted: bool
    attributes: list[str] = field(default_factory=list)


class GrantTable:
    """
    Queryable CRUD grants with transitive role inheritance.

    Build it once with ``from_config``; afterwards it is only read.
    """

    def __init__(self) -> None:
        model = casbin.Model()
        model.load_model_from_text(GRANT_MODEL)
        self._enforcer = casbin.Enforcer(model)
        self._roles: set[str] = set()

    @classmethod
    def from_config(cls, config: PermissionConfig) -> "GrantTable":
        table = cls()
        table.initialize(config)
        return table

    # ============================================================
    # CONSTRUCTION
    # ============================================================

    def initialize(self, config: PermissionConfig) -> None:
        """
        Register direct grants for every role, then link inheritance.

        Inheritance is processed only after all direct grants exist so that
        parents declared later in the file are known. A bad ``$extend``
        entry is logged and skipped; it never aborts initialization.
        """
        for role_name, role in config.roles.items():
            self._roles.add(role_name)
            for resource, permissions in role.permissions.items():
                for permission in permissions:
                    self._register(role_name, resource, permission)

        self._enforcer.get_role_manager().max_hierarchy_level = max(
            MIN_HIERARCHY_LEVEL, len(config.roles)
        )

        for role_name, role in config.roles.items():
            for parent in role.extends:
                try:
                    self._extend(role_name, parent)
                except GrantQueryError as e:
                    logger.warning(
                        "Failed to extend role",
                        role=role_name,
                        parent=parent,
                        error=str(e),
                    )

        logger.debug("Grant table initialized", roles=len(self._roles))

    def _register(self, role: str, resource: str, permission: str) -> None:
        action, _, scope = permission.partition(":")
        if action not in CRUD_ACTIONS:
            logger.debug(
                "Custom action left to business fallback",
                role=role,
                resource=resource,
                action=action,
            )
            return

        possession = scope_to_possession(scope)
        self._enforcer.add_policy(role, resource, action, possession.value)

    def _extend(self, role: str, parent: str) -> None:
        if parent not in self._roles:
            raise GrantQueryError(f"Role not found: {parent}")
        if parent == role:
            raise GrantQueryError(f"Role cannot extend itself: {role}")
        self._enforcer.add_grouping_policy(role, parent)

    # ============================================================
    # QUERIES
    # ============================================================

    def has_role(self, role: str) -> bool:
        return role in self._roles

    def query_grant(
        self,
        role: str,
        resource: str,
        action: str,
        possession: Possession | None,
    ) -> Grant | None:
        """
        Look up a CRUD grant, inherited grants included.

        Returns None ("no answer") for non-CRUD actions and for queries
        without a possession; that is different from a Grant with
        granted=False ("explicitly not granted").

        Raises:
            GrantQueryError: If the role is unknown
        """
        if action not in CRUD_ACTIONS or possession is None:
            return None

        if not self.has_role(role):
            raise GrantQueryError(f"Role not found: {role}")

        granted = self._enforcer.enforce(role, resource, action, possession.value)
        return Grant(
            role=role,
            resource=resource,
            action=action,
            possession=possession,
            granted=granted,
            attributes=["*"] if granted else [],
        )

    def direct_grants(self, role: str) -> list[tuple[str, str, Possession]]:
        """(resource, action, possession) registered on the role itself."""
        return [
            (resource, action, Possession(possession))
            for _, resource, action, possession in self._enforcer.get_filtered_policy(0, role)
        ]
