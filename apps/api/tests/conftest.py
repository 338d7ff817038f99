"""
Pytest fixtures for testing.

Provides:
- A small role configuration covering CRUD, custom actions and inheritance
- Permission service built from it
- Test client with the service injected and auth helpers
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from pms.main import create_app
from pms.core.auth import PermissionConfig, PermissionService
from pms.schemas.user import ClientContext, CurrentUser
from pms.services.auth import TokenService


CLIENT_ID = "test-client-uuid"


def make_config() -> dict:
    """Raw configuration in file format."""
    return {
        "roles": {
            "admin": {
                "property": ["create:any", "read:any", "update:any", "delete:any"],
                "client": ["read:mine", "update:mine"],
                "user": ["create:any", "read:any", "update:any", "delete:any"],
                "invitation": ["send:any", "revoke:any"],
            },
            "manager": {
                "property": ["create:any", "read:any", "update:any"],
                "client": ["read:mine", "update:mine"],
                "user": ["read:any", "update:mine"],
                "$extend": ["user"],
            },
            "user": {
                "property": ["read:mine"],
                "client": ["read:mine"],
                "user": ["read:mine", "update:mine"],
            },
            "tenant": {
                "property": ["read:assigned"],
                "user": ["read:mine", "update:mine"],
            },
            "staff": {
                "property": ["read:any"],
                "$extend": ["base"],
            },
            "base": {
                "property": ["read:mine"],
                "invitation": ["send:mine"],
            },
        },
        "resources": {
            "property": {
                "actions": ["create", "read", "update", "delete"],
                "scopes": ["any", "mine", "assigned"],
                "description": "Properties and units",
            },
            "client": {"actions": ["read", "update"]},
            "user": {"actions": ["create", "read", "update", "delete"]},
            "invitation": {"actions": ["send", "revoke"]},
        },
        "scopes": {
            "any": "Full access to all resources",
            "mine": {"description": "Access to own resources"},
            "assigned": {"description": "Access to assigned resources"},
        },
    }


def make_user(role: str, sub: str = "user-id") -> CurrentUser:
    return CurrentUser(
        sub=sub,
        email=f"{sub}@example.com",
        client=ClientContext(cuid=CLIENT_ID, role=role),
    )


# ============ Engine Fixtures ============


@pytest.fixture
def raw_config() -> dict:
    return make_config()


@pytest.fixture
def permission_config(raw_config: dict) -> PermissionConfig:
    return PermissionConfig.from_dict(raw_config)


@pytest.fixture
def service(permission_config: PermissionConfig) -> PermissionService:
    return PermissionService(permission_config)


# ============ API Fixtures ============


@pytest_asyncio.fixture(scope="function")
async def client(service: PermissionService) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with the permission service in place.

    ASGITransport does not run the lifespan, so the service is attached
    to app.state directly.
    """
    app = create_app(permission_service=service)
    app.state.permission_service = service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============ Auth Helpers ============


def get_auth_headers(user: CurrentUser) -> dict[str, str]:
    """Helper to get auth headers for any user."""
    token = TokenService().create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_user() -> CurrentUser:
    return make_user("manager", sub="manager-id")


@pytest.fixture
def auth_headers(manager_user: CurrentUser) -> dict[str, str]:
    """Auth headers for a manager."""
    return get_auth_headers(manager_user)
