import pytest

from app.models.ledger_entry import AuditLog


class TestCampaigns:
    @pytest.mark.asyncio
    async def test_create_and_read_stats(self, client, admin, trader, auth_headers) -> None:
        created = await client.post("/api/email-campaigns", json={"name": "Renewals"}, headers=auth_headers(admin))
        assert created.status_code == 201
        campaign_id = created.json()["id"]
        assert await AuditLog.find({"action": "CAMPAIGN_CREATED", "target_id": campaign_id}).count() == 1

        for _ in range(3):
            await client.get("/api/track/open", params={"email": trader.email, "campaign": campaign_id})

        stats = (await client.get(f"/api/email-campaigns/{campaign_id}/stats", headers=auth_headers(admin))).json()
        assert stats["openedCount"] == 3
        assert stats["uniqueOpens"] == 1
        assert stats["clickedCount"] == 0

    @pytest.mark.asyncio
    async def test_unknown_campaign_is_404(self, client, admin, auth_headers) -> None:
        response = await client.get("/api/email-campaigns/000000000000000000000000/stats", headers=auth_headers(admin))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_tracked_html(self, client, admin, auth_headers) -> None:
        campaign_id = (
            await client.post("/api/email-campaigns", json={"name": "Renewals"}, headers=auth_headers(admin))
        ).json()["id"]

        response = await client.post(
            f"/api/email-campaigns/{campaign_id}/tracked-html",
            json={"html": '<a href="https://example.com">Renew</a>', "msgid": "m1"},
            headers=auth_headers(admin),
        )
        html = response.json()["html"]
        assert "/api/track/click?url=https%3A%2F%2Fexample.com" in html
        assert f"campaign={campaign_id}" in html
