from unittest.mock import AsyncMock, patch

import pytest

from app.models.details import ChangeDetails
from app.models.ledger_entry import ActivityEvent, AuditLog
from app.models.user import User


class TestUsers:
    @pytest.mark.asyncio
    async def test_create_user_is_audited(self, client, admin, auth_headers) -> None:
        response = await client.post(
            "/api/users", json={"name": "Linus", "email": "linus@example.com"}, headers=auth_headers(admin)
        )

        assert response.status_code == 201
        user_id = response.json()["id"]
        audit = await AuditLog.find_one({"action": "CREATE_USER"})
        assert audit.actor_id == str(admin.id)
        assert audit.target_id == user_id
        assert audit.details.new_values["email"] == "linus@example.com"
        assert await ActivityEvent.find({"action": "USER_CREATED", "actor_id": user_id}).count() == 1

    @pytest.mark.asyncio
    async def test_create_succeeds_when_ledger_is_down(self, client, admin, auth_headers) -> None:
        with patch.object(AuditLog, "insert", AsyncMock(side_effect=RuntimeError("db down"))):
            response = await client.post(
                "/api/users", json={"name": "Linus", "email": "linus@example.com"}, headers=auth_headers(admin)
            )

        assert response.status_code == 201
        assert await User.find_one({"email": "linus@example.com"}) is not None
        assert await AuditLog.find_all().count() == 0

    @pytest.mark.asyncio
    async def test_role_change_is_audited_separately(self, client, admin, trader, auth_headers) -> None:
        response = await client.patch(
            f"/api/users/{trader.id}", json={"role": "MANAGER"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["role"] == "MANAGER"
        role_change = await AuditLog.find_one({"action": "ROLE_CHANGE"})
        assert isinstance(role_change.details, ChangeDetails)
        assert role_change.details.previous_values == {"role": "USER"}
        assert role_change.details.new_values == {"role": "MANAGER"}
        assert await AuditLog.find({"action": "UPDATE_USER"}).count() == 1

    @pytest.mark.asyncio
    async def test_delete_user(self, client, admin, trader, auth_headers) -> None:
        response = await client.delete(f"/api/users/{trader.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert await User.get(trader.id) is None
        assert await AuditLog.find({"action": "DELETE_USER", "target_id": str(trader.id)}).count() == 1

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, client, admin, auth_headers) -> None:
        response = await client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search_users(self, client, admin, trader, auth_headers) -> None:
        body = (await client.get("/api/users", params={"q": "hopper"}, headers=auth_headers(admin))).json()
        assert body["totalCount"] == 1
        assert body["users"][0]["email"] == trader.email
