"""
Scope validators for business-only scopes.

Built-in validators:
- assigned: no-op extension point
"""

from .builtin import AssignedScopeValidator

__all__ = ["AssignedScopeValidator"]
