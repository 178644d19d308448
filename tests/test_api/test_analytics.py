"""Tests for admin overview and clinician adherence analytics."""

import pytest
from httpx import AsyncClient

ANALYTICS = "/api/v1/analytics"


class TestOverview:
    @pytest.mark.asyncio
    async def test_overview_counts(self, client: AsyncClient, admin_headers):
        resp = await client.get(f"{ANALYTICS}/overview", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_clinicians"] == sum(data["clinicians_by_status"].values())
        assert data["clinicians_by_status"]["suspended"] >= 1
        assert data["total_patients"] == 4
        assert data["active_exercises"] == 3
        assert data["pending_exercises"] == 2
        assert data["open_tickets"] == 3
        assert data["pending_payment_verifications"] == 0

    @pytest.mark.asyncio
    async def test_overview_tracks_payments(self, client: AsyncClient, admin_headers, clinician_headers):
        await client.post(
            "/api/v1/billing/payments",
            headers=clinician_headers,
            json={"requested_plan_id": "plan_basic_monthly", "receipt_url": "https://receipts.example.com/1.png"},
        )
        resp = await client.get(f"{ANALYTICS}/overview", headers=admin_headers)
        assert resp.json()["pending_payment_verifications"] == 1

    @pytest.mark.asyncio
    async def test_overview_admin_only(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{ANALYTICS}/overview", headers=clinician_headers)
        assert resp.status_code == 403


class TestAdherence:
    @pytest.mark.asyncio
    async def test_tiers(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{ANALYTICS}/adherence", headers=clinician_headers)
        data = resp.json()
        assert data["overall_adherence"] == 70.0
        assert (data["high"], data["medium"], data["low"]) == (2, 1, 1)
        assert [row["patient_id"] for row in data["at_risk"]] == ["p4"]

        alice = next(row for row in data["patients"] if row["patient_id"] == "p1")
        assert alice["current_program_name"] == "Knee Rehab - Phase 2"
        assert alice["adherence_status"] == "High"

    @pytest.mark.asyncio
    async def test_empty_caseload(self, client: AsyncClient):
        resp = await client.get(f"{ANALYTICS}/adherence", headers={"X-User-Id": "doc1"})
        data = resp.json()
        assert data["overall_adherence"] == 0.0
        assert data["patients"] == []

    @pytest.mark.asyncio
    async def test_export(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{ANALYTICS}/adherence/export", headers=clinician_headers)
        assert resp.status_code == 200
        assert 'filename="patient_adherence_report.csv"' in resp.headers["content-disposition"]
        lines = resp.text.split("\n")
        assert lines[0].startswith("Patient ID,Patient Name,Email")
        assert len(lines) == 5
        assert lines[1].startswith("p1,Alice Green,alice.g@example.com,prog_alice_knee,Knee Rehab - Phase 2,85,")

    @pytest.mark.asyncio
    async def test_export_empty(self, client: AsyncClient):
        resp = await client.get(f"{ANALYTICS}/adherence/export", headers={"X-User-Id": "doc1"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No data to export"
