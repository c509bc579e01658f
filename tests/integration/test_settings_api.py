"""
Integration Tests - Platform Settings and Audit Log
"""
import uuid

SETTINGS = "/api/v1/admin/settings"
AUDIT_LOG = "/api/v1/admin/audit-log"


class TestPlatformSettings:
    """Tests for /admin/settings"""

    async def test_values_round_trip_through_json(self, client, admin_headers):
        for key, value in (("max_upload_size", 1024), ("registration_enabled", False), ("site_name", "BlogHub")):
            response = await client.put(SETTINGS, json={"key": key, "value": value}, headers=admin_headers)
            assert response.status_code == 200

        body = (await client.get(SETTINGS)).json()

        assert body["settings"] == {
            "max_upload_size": 1024,
            "registration_enabled": False,
            "site_name": "BlogHub",
        }
        raw = {row["key"]: row["value"] for row in body["rawSettings"]}
        assert raw == {"max_upload_size": "1024", "registration_enabled": "false", "site_name": "BlogHub"}

    async def test_upsert_replaces_value(self, client, admin_headers):
        await client.put(SETTINGS, json={"key": "featured_blogs_count", "value": 5}, headers=admin_headers)
        response = await client.put(
            SETTINGS,
            json={"key": "featured_blogs_count", "value": 8, "description": "Homepage slots"},
            headers=admin_headers,
        )

        assert response.json()["setting"]["value"] == "8"
        body = (await client.get(SETTINGS)).json()
        assert len(body["rawSettings"]) == 1
        assert body["rawSettings"][0]["description"] == "Homepage slots"

    async def test_structured_values(self, client, admin_headers):
        value = {"tags": ["python", "sql"], "max": 3}
        await client.put(SETTINGS, json={"key": "tag_policy", "value": value}, headers=admin_headers)

        body = (await client.get(SETTINGS)).json()

        assert body["settings"]["tag_policy"] == value

    async def test_delete(self, client, admin_headers):
        await client.put(SETTINGS, json={"key": "site_name", "value": "BlogHub"}, headers=admin_headers)

        response = await client.delete(f"{SETTINGS}/site_name", headers=admin_headers)

        assert response.status_code == 200
        assert (await client.get(SETTINGS)).json()["settings"] == {}

    async def test_delete_unknown_key(self, client, admin_headers):
        response = await client.delete(f"{SETTINGS}/nope", headers=admin_headers)

        assert response.status_code == 404

    async def test_update_requires_actor(self, client):
        response = await client.put(SETTINGS, json={"key": "site_name", "value": "x"})

        assert response.status_code == 401


class TestAuditLog:
    """Tests for /admin/audit-log"""

    async def test_records_actions_with_performer(self, client, factory, admin, admin_headers):
        target = await factory.user()
        await client.post(f"/api/v1/admin/users/{target.id}/suspend", json={"reason": "Spam"}, headers=admin_headers)
        await client.put(SETTINGS, json={"key": "site_name", "value": "BlogHub"}, headers=admin_headers)

        body = (await client.get(AUDIT_LOG)).json()

        assert body["pagination"]["total"] == 2
        assert {entry["action"] for entry in body["data"]} == {"USER_SUSPENDED", "SETTINGS_UPDATED"}
        entry = next(e for e in body["data"] if e["action"] == "USER_SUSPENDED")
        assert entry["performedBy"]["id"] == str(admin.id)
        assert entry["performedBy"]["role"] == "SUPER_ADMIN"
        assert entry["targetType"] == "USER"
        assert entry["targetId"] == str(target.id)
        assert entry["ipAddress"] == "127.0.0.1"

    async def test_filters(self, client, factory, admin, admin_headers):
        target = await factory.user()
        await client.post(f"/api/v1/admin/users/{target.id}/suspend", json={"reason": "Spam"}, headers=admin_headers)
        await client.post(f"/api/v1/admin/users/{target.id}/reinstate", headers=admin_headers)

        by_action = (await client.get(AUDIT_LOG, params={"action": "USER_REINSTATED"})).json()
        by_admin = (await client.get(AUDIT_LOG, params={"adminId": str(admin.id)})).json()
        by_stranger = (await client.get(AUDIT_LOG, params={"adminId": str(uuid.uuid4())})).json()

        assert [e["action"] for e in by_action["data"]] == ["USER_REINSTATED"]
        assert by_admin["pagination"]["total"] == 2
        assert by_stranger["data"] == []
