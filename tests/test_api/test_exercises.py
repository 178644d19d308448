"""Tests for the exercise library and program templates."""

import pytest
from httpx import AsyncClient

EXERCISES = "/api/v1/exercises"
TEMPLATES = "/api/v1/program-templates"

NEW_EXERCISE = {
    "name": "Wall Sit",
    "description": "Slide down a wall until the knees are bent at ninety degrees.",
    "category": "Strength",
    "difficulty": "Intermediate",
    "body_parts": "Legs, Glutes",
    "video_url": "",
}


class TestExerciseBrowsing:
    @pytest.mark.asyncio
    async def test_clinician_sees_only_active(self, client: AsyncClient, clinician_headers):
        resp = await client.get(EXERCISES, headers=clinician_headers)
        assert resp.status_code == 200
        assert {e["id"] for e in resp.json()} == {"ex1", "ex3", "ex5"}

    @pytest.mark.asyncio
    async def test_clinician_cannot_widen_status(self, client: AsyncClient, clinician_headers):
        resp = await client.get(EXERCISES, headers=clinician_headers, params={"status": "pending"})
        assert {e["id"] for e in resp.json()} == {"ex1", "ex3", "ex5"}

    @pytest.mark.asyncio
    async def test_admin_filters(self, client: AsyncClient, admin_headers):
        resp = await client.get(EXERCISES, headers=admin_headers, params={"status": "pending"})
        assert {e["id"] for e in resp.json()} == {"ex2", "ex6"}

        resp = await client.get(EXERCISES, headers=admin_headers, params={"difficulty": "Advanced"})
        assert [e["id"] for e in resp.json()] == ["ex6"]

    @pytest.mark.asyncio
    async def test_search_matches_description(self, client: AsyncClient, admin_headers):
        resp = await client.get(EXERCISES, headers=admin_headers, params={"search": "thigh"})
        assert [e["id"] for e in resp.json()] == ["ex5"]

    @pytest.mark.asyncio
    async def test_pending_hidden_from_clinician(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{EXERCISES}/ex2", headers=clinician_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_categories(self, client: AsyncClient, patient_headers):
        resp = await client.get(f"{EXERCISES}/categories", headers=patient_headers)
        assert "Strength" in resp.json()
        assert "Rehab" in resp.json()


class TestExerciseAdmin:
    @pytest.mark.asyncio
    async def test_create_splits_body_parts(self, client: AsyncClient, admin_headers):
        resp = await client.post(EXERCISES, headers=admin_headers, json=NEW_EXERCISE)
        assert resp.status_code == 201
        data = resp.json()
        assert data["body_parts"] == ["Legs", "Glutes"]
        assert data["status"] == "pending"
        assert data["video_url"] is None

    @pytest.mark.asyncio
    async def test_create_validation(self, client: AsyncClient, admin_headers):
        bad = {**NEW_EXERCISE, "description": "short"}
        resp = await client.post(EXERCISES, headers=admin_headers, json=bad)
        assert resp.status_code == 422

        bad = {**NEW_EXERCISE, "video_url": "not a url"}
        resp = await client.post(EXERCISES, headers=admin_headers, json=bad)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_clinician_cannot_create(self, client: AsyncClient, clinician_headers):
        resp = await client.post(EXERCISES, headers=clinician_headers, json=NEW_EXERCISE)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_approve_pending(self, client: AsyncClient, admin_headers, clinician_headers):
        resp = await client.put(f"{EXERCISES}/ex2/status", headers=admin_headers, json={"status": "active"})
        assert resp.json()["status"] == "active"

        log = await client.get("/api/v1/audit-log", headers=admin_headers, params={"limit": 1})
        assert log.json()[0]["action"] == "Approved Exercise"

        visible = await client.get(f"{EXERCISES}/ex2", headers=clinician_headers)
        assert visible.status_code == 200

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient, admin_headers):
        resp = await client.put(f"{EXERCISES}/ex6/status", headers=admin_headers, json={"status": "rejected"})
        assert resp.json()["status"] == "rejected"
        log = await client.get("/api/v1/audit-log", headers=admin_headers, params={"limit": 1})
        assert log.json()[0]["action"] == "Rejected Exercise"

    @pytest.mark.asyncio
    async def test_toggle_featured(self, client: AsyncClient, admin_headers):
        resp = await client.post(f"{EXERCISES}/ex1/featured", headers=admin_headers)
        assert resp.json()["is_featured"] is False

        resp = await client.post(f"{EXERCISES}/ex1/featured", headers=admin_headers)
        assert resp.json()["is_featured"] is True

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, admin_headers):
        resp = await client.put(f"{EXERCISES}/ex4", headers=admin_headers, json={"equipment": "Kettlebell"})
        assert resp.json()["equipment"] == "Kettlebell"

        resp = await client.delete(f"{EXERCISES}/ex4", headers=admin_headers)
        assert resp.status_code == 204

        resp = await client.get(f"{EXERCISES}/ex4", headers=admin_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown(self, client: AsyncClient, admin_headers):
        resp = await client.delete(f"{EXERCISES}/ex_missing", headers=admin_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_export_filtered(self, client: AsyncClient, admin_headers):
        resp = await client.get(f"{EXERCISES}/export", headers=admin_headers, params={"status": "active"})
        assert resp.status_code == 200
        assert 'filename="exercises_export.csv"' in resp.headers["content-disposition"]
        lines = resp.text.split("\n")
        assert len(lines) == 4
        assert "Legs; Glutes" in resp.text

    @pytest.mark.asyncio
    async def test_export_nothing(self, client: AsyncClient, admin_headers):
        resp = await client.get(f"{EXERCISES}/export", headers=admin_headers, params={"search": "zzz"})
        assert resp.status_code == 400


class TestProgramTemplates:
    @pytest.mark.asyncio
    async def test_clinician_sees_usable_only(self, client: AsyncClient, clinician_headers):
        resp = await client.get(TEMPLATES, headers=clinician_headers)
        assert {t["id"] for t in resp.json()} == {"tpl1", "tpl2"}

    @pytest.mark.asyncio
    async def test_admin_sees_drafts(self, client: AsyncClient, admin_headers):
        resp = await client.get(TEMPLATES, headers=admin_headers)
        assert {t["id"] for t in resp.json()} == {"tpl1", "tpl2", "tpl3"}

    @pytest.mark.asyncio
    async def test_patient_program_is_not_a_template(self, client: AsyncClient, admin_headers):
        resp = await client.get(f"{TEMPLATES}/prog_alice_knee", headers=admin_headers)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_create_update_delete(self, client: AsyncClient, admin_headers):
        resp = await client.post(
            TEMPLATES,
            headers=admin_headers,
            json={
                "name": "Ankle Stability",
                "category": "Lower Limb",
                "exercises": [{"exercise_id": "ex1", "sets": 3, "reps": 12}],
            },
        )
        assert resp.status_code == 201
        template_id = resp.json()["id"]
        assert resp.json()["is_template"] is True
        assert resp.json()["status"] == "template"

        resp = await client.put(f"{TEMPLATES}/{template_id}", headers=admin_headers, json={"status": "draft"})
        assert resp.json()["status"] == "draft"

        resp = await client.delete(f"{TEMPLATES}/{template_id}", headers=admin_headers)
        assert resp.status_code == 204

        log = await client.get("/api/v1/audit-log", headers=admin_headers, params={"limit": 1})
        assert log.json()[0]["action"] == "Deleted Program Template"
