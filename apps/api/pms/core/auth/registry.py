"""
Scope validator registry.

Business-only scopes ("assigned", "available", ...) can carry extra
checks beyond "the role lists this permission string". Validators
register themselves by scope name using a decorator, without touching
the permission service.

Usage:
    @ScopeRegistry.validator("assigned")
    class AssignedScopeValidator(ScopeValidator):
        ...

    # Later, build instances for a service:
    validators = ScopeRegistry.build_validators()
"""

from typing import Any, Callable, Type

from .interfaces import ScopeValidator


class ScopeRegistry:
    """
    Central registry for scope validators.

    Holds classes only; every PermissionService gets its own instances.
    """

    _validators: dict[str, Type[ScopeValidator]] = {}

    @classmethod
    def validator(cls, scope: str) -> Callable[[Type[ScopeValidator]], Type[ScopeValidator]]:
        """
        Decorator to register a scope validator.

        Usage:
            @ScopeRegistry.validator("assigned")
            class AssignedScopeValidator(ScopeValidator):
                ...
        """
        def decorator(validator_class: Type[ScopeValidator]) -> Type[ScopeValidator]:
            cls._validators[scope] = validator_class
            return validator_class
        return decorator

    @classmethod
    def get_validator(cls, scope: str, **kwargs: Any) -> ScopeValidator:
        """
        Get a validator instance by scope.

        Raises:
            ValueError: If no validator is registered for the scope
        """
        validator_class = cls._validators.get(scope)
        if not validator_class:
            available = list(cls._validators.keys())
            raise ValueError(
                f"Unknown scope validator: '{scope}'. "
                f"Available: {available}"
            )
        return validator_class(**kwargs)

    @classmethod
    def build_validators(cls) -> dict[str, ScopeValidator]:
        """Instantiate every registered validator, keyed by scope."""
        return {scope: cls.get_validator(scope) for scope in cls._validators}
