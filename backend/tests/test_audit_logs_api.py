from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from app.models.details import ChangeDetails
from app.models.enums import Role
from app.models.ledger_entry import AuditLog


async def _entry(action: str, role: Role = Role.USER, actor_id: str = "u1", **fields) -> AuditLog:
    entry = AuditLog(action=action, actor_role=role, actor_id=actor_id, **fields)
    await entry.insert()
    return entry


class TestAccess:
    @pytest.mark.asyncio
    async def test_requires_session(self, client) -> None:
        assert (await client.get("/api/audit-logs")).status_code == 401

    @pytest.mark.asyncio
    async def test_rejects_forged_token(self, client) -> None:
        response = await client.get("/api/audit-logs", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_users_are_forbidden(self, client, trader, auth_headers) -> None:
        assert (await client.get("/api/audit-logs", headers=auth_headers(trader))).status_code == 403


class TestListAuditLogs:
    @pytest.mark.asyncio
    async def test_page_shape(self, client, admin, auth_headers) -> None:
        base = datetime.now(timezone.utc) - timedelta(minutes=10)
        for i in range(3):
            await _entry("LOGIN", timestamp=base + timedelta(minutes=i))
        await _entry("ROLE_CHANGE", role=Role.ADMIN, details=ChangeDetails(new_values={"role": "MANAGER"}))

        response = await client.get("/api/audit-logs", params={"limit": 2}, headers=auth_headers(admin))
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["totalCount"] == 4
        assert body["hasMore"] is True
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert body["state"]["total"] == 4
        assert body["availableEventTypes"] == ["LOGIN", "ROLE_CHANGE"]
        first = body["auditLogs"][0]
        assert first["action"] == "ROLE_CHANGE"
        assert first["details"] == {
            "kind": "change",
            "previous_values": {},
            "new_values": {"role": "MANAGER"},
            "reason": None,
        }
        assert "revision_id" not in first

    @pytest.mark.asyncio
    async def test_filters(self, client, admin, auth_headers) -> None:
        await _entry("LOGIN")
        await _entry("DELETE_PAIR", role=Role.MANAGER)
        await _entry("UPDATE_PAIR", role=Role.ADMIN, response_status="FAILURE")
        headers = auth_headers(admin)

        staff = (await client.get("/api/audit-logs", params={"role": "NOTUSER"}, headers=headers)).json()
        pairs = (await client.get("/api/audit-logs", params={"q": "pair"}, headers=headers)).json()
        failed = (await client.get("/api/audit-logs", params={"responseStatus": "failure"}, headers=headers)).json()
        logins = (await client.get("/api/audit-logs", params={"action": "login"}, headers=headers)).json()

        assert staff["totalCount"] == 2
        assert pairs["totalCount"] == 2
        assert failed["totalCount"] == 1
        assert logins["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_unknown_period_is_bad_request(self, client, admin, auth_headers) -> None:
        response = await client.get("/api/audit-logs", params={"period": "2w"}, headers=auth_headers(admin))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, client, admin, auth_headers) -> None:
        with patch.object(AuditLog, "find", side_effect=RuntimeError("db down")):
            response = await client.get("/api/audit-logs", headers=auth_headers(admin))

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["message"] == "Failed to fetch audit logs"


class TestCreateAuditLog:
    @pytest.mark.asyncio
    async def test_blank_action_is_a_validation_error(self, client, trader, auth_headers) -> None:
        response = await client.post("/api/audit-logs", json={"action": "   "}, headers=auth_headers(trader))
        assert response.status_code == 422
        assert await AuditLog.find_all().count() == 0

    @pytest.mark.asyncio
    async def test_client_hook_records_entry(self, client, trader, auth_headers) -> None:
        response = await client.post(
            "/api/audit-logs",
            json={"action": "update_pair", "targetId": "p1", "details": {"pairId": "p1"}},
            headers=auth_headers(trader),
        )

        assert response.status_code == 201
        entry = await AuditLog.find_one({"action": "UPDATE_PAIR"})
        assert entry.actor_id == str(trader.id)
        assert entry.target_id == "p1"
        assert entry.details.data == {"pairId": "p1"}

    @pytest.mark.asyncio
    async def test_storage_failure_is_accepted_not_raised(self, client, trader, auth_headers) -> None:
        with patch.object(AuditLog, "insert", AsyncMock(side_effect=RuntimeError("db down"))):
            response = await client.post("/api/audit-logs", json={"action": "LOGOUT"}, headers=auth_headers(trader))
        assert response.status_code == 202
        assert response.json()["success"] is False


class TestAuditStats:
    @pytest.mark.asyncio
    async def test_stats(self, client, admin, auth_headers) -> None:
        await _entry("LOGIN")
        await _entry("LOGIN", timestamp=datetime.now(timezone.utc) - timedelta(days=400))

        body = (await client.get("/api/audit-logs/stats", headers=auth_headers(admin))).json()
        assert body["stats"]["totalAudits"] == 2
        assert body["stats"]["auditsToday"] == 1
        assert set(body["stats"]) == {"totalAudits", "auditsThisMonth", "auditsThisWeek", "auditsToday"}


class TestUndecodableRows:
    @pytest.mark.asyncio
    async def test_unknown_details_kind_is_a_server_error(self, client, admin, auth_headers) -> None:
        await AuditLog.get_motor_collection().insert_one(
            {"action": "LOGIN", "actor_role": "USER", "timestamp": datetime(2026, 3, 1), "details": {"kind": "legacy"}}
        )
        response = await client.get("/api/audit-logs", headers=auth_headers(admin))

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch audit logs"
        assert "legacy" not in response.json()["error"]
