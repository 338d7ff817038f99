"""
Permission engine exceptions.
"""


class PermissionEngineError(Exception):
    """Base class for permission engine errors."""


class PermissionConfigError(PermissionEngineError):
    """
    The static role configuration is structurally invalid.

    Raised only while loading configuration. The process must not start
    with an unusable permission engine.
    """


class GrantQueryError(PermissionEngineError):
    """The grant table cannot answer a query (e.g. the role is unknown)."""
