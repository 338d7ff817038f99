"""
Tests for permission endpoints.
"""

import pytest
from fastapi import Depends
from httpx import AsyncClient, ASGITransport

from pms.core.auth import PermissionAction, PermissionResource, PermissionService
from pms.api.dependencies import require_permission
from pms.main import create_app
from pms.schemas.user import CurrentUser

from conftest import get_auth_headers, make_user


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-1"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["roles"] == 6
    assert response.headers["X-Request-ID"] == "req-1"


@pytest.mark.asyncio
async def test_my_permissions(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/permissions/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["sub"] == "manager-id"
    assert data["role"] == "manager"
    assert data["client_id"] == "test-client-uuid"
    assert "create:any" in data["permissions"]
    assert "property:create:any" in data["permissions"]
    assert "user:update:mine" in data["permissions"]


@pytest.mark.asyncio
async def test_role_permissions(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/permissions/roles/staff", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "role": "staff",
        "inherits": ["base"],
        "permissions": {"property": ["read:any"]},
    }


@pytest.mark.asyncio
async def test_unknown_role_not_found(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/permissions/roles/ghost", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_resources_actions_and_scopes(client: AsyncClient, auth_headers: dict):
    resources = await client.get("/api/permissions/resources", headers=auth_headers)
    actions = await client.get("/api/permissions/resources/invitation/actions", headers=auth_headers)
    unknown = await client.get("/api/permissions/resources/lease/actions", headers=auth_headers)
    scopes = await client.get("/api/permissions/scopes", headers=auth_headers)

    assert resources.json() == ["property", "client", "user", "invitation"]
    assert actions.json() == ["send", "revoke"]
    assert unknown.json() == []
    assert scopes.json()["mine"] == "Access to own resources"


@pytest.mark.asyncio
async def test_check_granted(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/permissions/check",
        headers=auth_headers,
        json={"role": "staff", "resource": "invitation", "action": "send", "scope": "mine"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "granted": True,
        "reason": "Permission 'send:mine' granted by role configuration",
        "attributes": None,
    }


@pytest.mark.asyncio
async def test_check_denied_uses_default_scope(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/permissions/check",
        headers=auth_headers,
        json={"role": "tenant", "resource": "property", "action": "delete"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["granted"] is False
    assert data["reason"] == "Role 'tenant' does not have permission 'delete:any' on resource 'property'"


@pytest.mark.asyncio
async def test_check_with_context(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/permissions/check",
        headers=auth_headers,
        json={
            "role": "tenant",
            "resource": "property",
            "action": "read",
            "scope": "assigned",
            "context": {"user_id": "tenant-id", "assigned_users": ["tenant-id"]},
        },
    )

    assert response.json()["granted"] is True


@pytest.mark.asyncio
async def test_check_rejects_empty_action(client: AsyncClient, auth_headers: dict):
    response = await client.post(
        "/api/permissions/check",
        headers=auth_headers,
        json={"role": "admin", "resource": "property", "action": ""},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("permission,valid", [("read:mine", True), ("read:bogus", False), (":any", False)])
async def test_validate(client: AsyncClient, auth_headers: dict, permission, valid):
    response = await client.post(
        "/api/permissions/validate",
        headers=auth_headers,
        json={"permission": permission},
    )

    assert response.status_code == 200
    assert response.json() == {"permission": permission, "valid": valid}


# ============ require_permission ============


def build_guarded_app(service: PermissionService):
    app = create_app(permission_service=service)
    app.state.permission_service = service

    @app.delete("/properties/{property_id}")
    async def delete_property(
        property_id: str,
        user: CurrentUser = Depends(
            require_permission(PermissionResource.PROPERTY, PermissionAction.DELETE)
        ),
    ):
        return {"deleted": property_id, "permissions": user.permissions}

    @app.patch("/users/{user_id}")
    async def update_user(
        user_id: str,
        user: CurrentUser = Depends(
            require_permission(PermissionResource.USER, PermissionAction.UPDATE, "user_id")
        ),
    ):
        return {"updated": user_id}

    return app


@pytest.fixture
def guarded_client(service: PermissionService):
    app = build_guarded_app(service)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_require_permission_allows(guarded_client: AsyncClient):
    async with guarded_client as client:
        response = await client.delete("/properties/p1", headers=get_auth_headers(make_user("admin")))

    assert response.status_code == 200
    data = response.json()
    assert data["deleted"] == "p1"
    assert "property:delete:any" in data["permissions"]


@pytest.mark.asyncio
async def test_require_permission_forbids(guarded_client: AsyncClient):
    async with guarded_client as client:
        response = await client.delete("/properties/p1", headers=get_auth_headers(make_user("tenant")))

    assert response.status_code == 403
    assert response.json()["detail"] == (
        "Role 'tenant' does not have permission 'delete:any' on resource 'property'"
    )


@pytest.mark.asyncio
async def test_require_permission_derives_own_scope(guarded_client: AsyncClient):
    tenant = make_user("tenant", sub="tenant-id")

    async with guarded_client as client:
        own = await client.patch("/users/tenant-id", headers=get_auth_headers(tenant))
        other = await client.patch("/users/other-id", headers=get_auth_headers(tenant))

    assert own.status_code == 200
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_health_before_startup():
    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 503
    assert response.headers["X-Request-ID"]
