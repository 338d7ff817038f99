"""
Tests for inheritance-aware lookup over the raw configuration.
"""

from pms.core.auth import PermissionConfig, has_permission_with_inheritance, inherited_roles
from pms.core.auth.inheritance import walk_roles


def test_direct_permission(permission_config: PermissionConfig):
    assert has_permission_with_inheritance(permission_config, "admin", "invitation", "send:any")


def test_inherited_custom_permission(permission_config: PermissionConfig):
    """staff extends base, which holds send:mine on invitation."""
    assert has_permission_with_inheritance(permission_config, "staff", "invitation", "send:mine")
    assert not has_permission_with_inheritance(permission_config, "staff", "invitation", "send:any")


def test_exact_string_match(permission_config: PermissionConfig):
    assert has_permission_with_inheritance(permission_config, "tenant", "property", "read:assigned")
    assert not has_permission_with_inheritance(permission_config, "tenant", "property", "read:any")
    assert not has_permission_with_inheritance(permission_config, "tenant", "property", "read")


def test_unknown_role_or_resource(permission_config: PermissionConfig):
    assert not has_permission_with_inheritance(permission_config, "ghost", "property", "read:any")
    assert not has_permission_with_inheritance(permission_config, "admin", "lease", "read:any")


def test_cycle_terminates():
    config = PermissionConfig.from_dict({
        "roles": {
            "a": {"$extend": ["b"]},
            "b": {"$extend": ["c"]},
            "c": {"property": ["read:any"], "$extend": ["a"]},
        }
    })

    assert has_permission_with_inheritance(config, "a", "property", "read:any")
    assert not has_permission_with_inheritance(config, "a", "property", "delete:any")
    assert list(walk_roles(config, "a")) == ["a", "b", "c"]


def test_self_and_missing_parents_are_skipped():
    config = PermissionConfig.from_dict({
        "roles": {
            "a": {"property": ["read:any"], "$extend": ["a", "missing"]},
        }
    })

    assert has_permission_with_inheritance(config, "a", "property", "read:any")
    assert inherited_roles(config, "a") == []


def test_diamond_visits_each_role_once():
    config = PermissionConfig.from_dict({
        "roles": {
            "top": {"$extend": ["left", "right"]},
            "left": {"$extend": ["base"]},
            "right": {"$extend": ["base"]},
            "base": {"lease": ["read:mine"]},
        }
    })

    assert list(walk_roles(config, "top")) == ["top", "left", "base", "right"]
    assert has_permission_with_inheritance(config, "right", "lease", "read:mine")


def test_inherited_roles(permission_config: PermissionConfig):
    assert inherited_roles(permission_config, "manager") == ["user"]
    assert inherited_roles(permission_config, "admin") == []
