"""Tests for admin clinician management."""

import pytest
from httpx import AsyncClient

BASE = "/api/v1/clinicians"


async def _last_audit(client: AsyncClient, headers: dict) -> dict:
    resp = await client.get("/api/v1/audit-log", headers=headers, params={"limit": 1})
    return resp.json()[0]


class TestListClinicians:
    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, clinician_headers):
        resp = await client.get(BASE, headers=clinician_headers)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        resp = await client.get(BASE)
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_lists_all_with_cities(self, client: AsyncClient, admin_headers):
        resp = await client.get(BASE, headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        ids = {c["id"] for c in data["items"]}
        assert {"doc1", "doc2", "doc3", "doc_current", "doc4", "doc5"} <= ids
        assert data["available_cities"] == ["Islamabad", "Karachi", "Lahore"]

    @pytest.mark.asyncio
    async def test_filters_combine(self, client: AsyncClient, admin_headers):
        resp = await client.get(BASE, headers=admin_headers, params={"status": "active", "city": "Karachi"})
        ids = {c["id"] for c in resp.json()["items"]}
        assert ids == {"doc1", "doc_current"}

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, client: AsyncClient, admin_headers):
        resp = await client.get(BASE, headers=admin_headers, params={"search": "USMAN"})
        assert [c["id"] for c in resp.json()["items"]] == ["doc2"]

    @pytest.mark.asyncio
    async def test_sort_by_name(self, client: AsyncClient, admin_headers):
        resp = await client.get(BASE, headers=admin_headers, params={"sort_by": "nameAsc"})
        names = [c["name"] for c in resp.json()["items"]]
        assert names == sorted(names)

    @pytest.mark.asyncio
    async def test_unknown_sort_rejected(self, client: AsyncClient, admin_headers):
        resp = await client.get(BASE, headers=admin_headers, params={"sort_by": "random"})
        assert resp.status_code == 422


class TestClinicianMutations:
    @pytest.mark.asyncio
    async def test_add_defaults_and_audit(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            BASE,
            headers=admin_headers,
            json={"name": "Dr. Omar Field", "email": "omar.field@clinic.dev", "role": "Doctor"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["subscription_status"] == "trial"
        assert data["city"] == "Not Specified"
        assert data["patient_count"] == 0

        entry = await _last_audit(client, admin_headers)
        assert entry["action"] == "Added Clinician"
        assert entry["target_entity_id"] == data["id"]

        inbox = await client.get("/api/v1/notifications", headers={"X-User-Id": data["id"]})
        assert inbox.json()[0]["title"] == "Your PhysioPro Account is Ready!"

    @pytest.mark.asyncio
    async def test_add_with_plan_is_active_subscription(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            BASE,
            headers=admin_headers,
            json={
                "name": "Dr. Omar Field",
                "email": "omar.field@clinic.dev",
                "role": "Doctor",
                "current_plan_id": "plan_pro_monthly",
            },
        )
        assert resp.json()["subscription_status"] == "active"

    @pytest.mark.asyncio
    async def test_add_rejects_non_professional_role(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            BASE,
            headers=admin_headers,
            json={"name": "Someone", "email": "someone@clinic.dev", "role": "Patient"},
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_add_duplicate_email(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            BASE,
            headers=admin_headers,
            json={"name": "Copy Cat", "email": "ayesha@medcare.com", "role": "Doctor"},
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_update_in_place(self, client: AsyncClient, admin_headers):
        resp = await client.put(f"{BASE}/doc1", headers=admin_headers, json={"city": "Lahore"})
        assert resp.status_code == 200
        assert resp.json()["city"] == "Lahore"
        assert resp.json()["name"] == "Dr. Ayesha Khan"

        entry = await _last_audit(client, admin_headers)
        assert entry["action"] == "Updated Clinician"

    @pytest.mark.asyncio
    async def test_update_unknown_with_full_payload_creates(self, client: AsyncClient, admin_headers):
        resp = await client.put(
            f"{BASE}/doc_new",
            headers=admin_headers,
            json={"name": "Dr. New Person", "email": "new.person@clinic.dev", "role": "Doctor"},
        )
        assert resp.status_code == 200
        assert resp.json()["id"] == "doc_new"
        assert resp.json()["status"] == "active"

    @pytest.mark.asyncio
    async def test_update_unknown_partial_is_404(self, client: AsyncClient, admin_headers):
        resp = await client.put(f"{BASE}/doc_missing", headers=admin_headers, json={"city": "Lahore"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_suspend_and_activate(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{BASE}/doc1/suspend", headers=admin_headers)
        assert resp.json()["status"] == "suspended"
        assert (await _last_audit(client, admin_headers))["action"] == "Suspended Clinician"

        resp = await client.post(f"{BASE}/doc1/activate", headers=admin_headers)
        assert resp.json()["status"] == "active"
        assert (await _last_audit(client, admin_headers))["action"] == "Activated Clinician"

    @pytest.mark.asyncio
    async def test_team_member_is_not_a_clinician(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{BASE}/tm2/suspend", headers=admin_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, client: AsyncClient, admin_headers):
        resp = await client.delete(f"{BASE}/doc4", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "inactive"

        still_there = await client.get(f"{BASE}/doc4", headers=admin_headers)
        assert still_there.status_code == 200

    @pytest.mark.asyncio
    async def test_bulk_status(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            f"{BASE}/bulk-status",
            headers=admin_headers,
            json={"ids": ["doc1", "doc4", "tm1"], "status": "pending"},
        )
        assert resp.status_code == 200
        assert {c["id"] for c in resp.json()} == {"doc1", "doc4"}
        assert all(c["status"] == "pending" for c in resp.json())

        entry = await _last_audit(client, admin_headers)
        assert entry["action"] == "Bulk Status Change"
        assert entry["details"]["newStatus"] == "pending"

    @pytest.mark.asyncio
    async def test_bulk_status_needs_ids(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{BASE}/bulk-status", headers=admin_headers, json={"ids": [], "status": "active"})
        assert resp.status_code == 422


class TestClinicianExport:
    @pytest.mark.asyncio
    async def test_export_selected(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{BASE}/export", headers=admin_headers, json={"ids": ["doc1", "doc2"]})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert 'filename="selected_clinicians.csv"' in resp.headers["content-disposition"]

        lines = resp.text.split("\n")
        assert lines[0].startswith("ID,Name,Email,Role")
        assert len(lines) == 3

    @pytest.mark.asyncio
    async def test_export_empty_selection(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{BASE}/export", headers=admin_headers, json={"ids": []})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No data to export"
