"""
Inheritance-aware permission lookup over the raw role configuration.

Answers permissions the CRUD grant table cannot express: custom actions
("send:mine", "revoke:any") and business-only scopes ("read:assigned").
"""

from collections.abc import Iterator

from .config import PermissionConfig


def walk_roles(config: PermissionConfig, role: str) -> Iterator[str]:
    """
    Yield `role` and its ancestors depth-first, parents in declared order.

    Every role is yielded at most once, so inheritance cycles terminate.
    Names without a configuration entry are yielded but not expanded.
    """
    visited: set[str] = set()
    stack = [role]

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        yield current

        role_def = config.get_role(current)
        if role_def is not None:
            stack.extend(reversed(role_def.extends))


def has_permission_with_inheritance(
    config: PermissionConfig,
    role: str,
    resource: str,
    permission: str,
) -> bool:
    """
    Check whether `role`, or any role it extends, lists `permission` on `resource`.

    Matching is an exact string comparison on "<action>:<scope>": no
    normalization, no wildcards. A role reachable through several paths
    is checked once; membership does not depend on the path.
    """
    for current in walk_roles(config, role):
        role_def = config.get_role(current)
        if role_def is None:
            continue
        if permission in role_def.permissions_for(resource):
            return True

    return False


def inherited_roles(config: PermissionConfig, role: str) -> list[str]:
    """Configured ancestors of `role`, nearest first along each branch."""
    return [
        name
        for name in walk_roles(config, role)
        if name != role and config.has_role(name)
    ]
