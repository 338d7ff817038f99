"""
Static role configuration.

The configuration file declares, per role, which permission strings it
holds on each resource, plus optional parent roles under ``$extend``:

    {
        "roles": {
            "staff": {"property": ["read:any"], "$extend": ["base"]},
            "base": {"property": ["read:mine"]}
        },
        "resources": {"property": {"actions": ["read"], "scopes": ["any"]}},
        "scopes": {"any": "Any resource in the client", "mine": "Own resources"}
    }

It is loaded once at startup and never mutated afterwards. A structurally
invalid file raises PermissionConfigError; broken ``$extend`` references
are NOT a structural problem and are left for the resolvers to skip.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import PermissionConfigError


EXTEND_KEY = "$extend"


class RoleDefinition(BaseModel):
    """One role: parent roles plus resource -> permission strings."""

    model_config = ConfigDict(frozen=True)

    extends: tuple[str, ...] = ()
    permissions: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, data: Any) -> "RoleDefinition":
        """Build from the file format, where ``$extend`` sits beside resources."""
        if isinstance(data, RoleDefinition):
            return data
        if not isinstance(data, Mapping):
            raise ValueError("role definition must be an object")

        return cls(
            extends=data.get(EXTEND_KEY, ()),
            permissions={k: v for k, v in data.items() if k != EXTEND_KEY},
        )

    def permissions_for(self, resource: str) -> tuple[str, ...]:
        """Direct permission strings on a resource; empty when not configured."""
        return self.permissions.get(resource, ())


class ResourceDefinition(BaseModel):
    """Resource metadata used by listing endpoints."""

    model_config = ConfigDict(frozen=True)

    actions: tuple[str, ...] = ()
    scopes: tuple[str, ...] = ()
    description: str | None = None


class PermissionConfig(BaseModel):
    """Whole static configuration: roles, resources and valid scopes."""

    model_config = ConfigDict(frozen=True)

    roles: dict[str, RoleDefinition]
    resources: dict[str, ResourceDefinition] = Field(default_factory=dict)
    scopes: dict[str, str] = Field(default_factory=dict)

    @field_validator("roles", mode="before")
    @classmethod
    def parse_roles(cls, v: Any) -> Any:
        if not isinstance(v, Mapping):
            raise ValueError("roles must be an object")
        return {name: RoleDefinition.from_raw(role) for name, role in v.items()}

    @field_validator("scopes", mode="before")
    @classmethod
    def parse_scopes(cls, v: Any) -> Any:
        # Scopes appear either as plain descriptions or {"description": ...}
        if not isinstance(v, Mapping):
            raise ValueError("scopes must be an object")
        parsed = {}
        for name, value in v.items():
            if isinstance(value, Mapping):
                value = value.get("description", "")
            parsed[name] = value
        return parsed

    # ============================================================
    # CONSTRUCTION
    # ============================================================

    @classmethod
    def from_dict(cls, data: Any) -> "PermissionConfig":
        """
        Parse a configuration object.

        Raises:
            PermissionConfigError: If the structure is invalid
        """
        if not isinstance(data, Mapping):
            raise PermissionConfigError("Permission configuration must be an object")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PermissionConfigError(f"Invalid permission configuration: {e}") from e

    # ============================================================
    # LOOKUPS
    # ============================================================

    def get_role(self, role: str) -> RoleDefinition | None:
        return self.roles.get(role)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def role_names(self) -> list[str]:
        return list(self.roles.keys())

    @property
    def scope_names(self) -> list[str]:
        return list(self.scopes.keys())


def load_permission_config(path: str | Path) -> PermissionConfig:
    """
    Load the configuration file.

    Raises:
        PermissionConfigError: If the file is unreadable or invalid
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise PermissionConfigError(f"Cannot read permission configuration {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PermissionConfigError(f"Malformed permission configuration {path}: {e}") from e

    return PermissionConfig.from_dict(data)
