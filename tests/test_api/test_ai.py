"""Tests for the AI assistant endpoints."""

import pytest
from httpx import AsyncClient

from physiopro.api.routes.ai import ai_rate_limiter
from physiopro.flows import (
    EmailDraftOutput,
    ExerciseSearchOutput,
    FeedbackValidationOutput,
    ProgramBuilderOutput,
)
from physiopro.llm import LLMConnectionError, LLMValidationError

AI = "/api/v1/ai"


def _prompt(mock_llm_router) -> str:
    return mock_llm_router.complete_structured.call_args.args[0][1].content


class TestEmailDraft:
    @pytest.mark.asyncio
    async def test_draft(self, client: AsyncClient, admin_headers, mock_llm_router):
        mock_llm_router.complete_structured.return_value = EmailDraftOutput(
            generated_email_body="Our AI search is live.", suggested_subject="Meet AI search"
        )
        resp = await client.post(
            f"{AI}/email-draft",
            headers=admin_headers,
            json={"prompt": "Announce AI exercise search", "recipient_context": "all clinicians"},
        )
        assert resp.status_code == 200
        assert resp.json()["suggested_subject"] == "Meet AI search"
        assert "Recipient Context: all clinicians" in _prompt(mock_llm_router)

    @pytest.mark.asyncio
    async def test_admin_only(self, client: AsyncClient, clinician_headers):
        resp = await client.post(f"{AI}/email-draft", headers=clinician_headers, json={"prompt": "Hi"})
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_model_outage(self, client: AsyncClient, admin_headers, mock_llm_router):
        mock_llm_router.complete_structured.side_effect = LLMConnectionError("down")
        resp = await client.post(f"{AI}/email-draft", headers=admin_headers, json={"prompt": "Hi"})
        assert resp.status_code == 503


class TestExerciseSearch:
    @pytest.mark.asyncio
    async def test_keeps_active_library_matches(self, client: AsyncClient, clinician_headers, mock_llm_router):
        mock_llm_router.complete_structured.return_value = ExerciseSearchOutput(
            results=["Plank", "Push Up", "Dead Bug", " Standard Squat "]
        )
        resp = await client.post(f"{AI}/exercise-search", headers=clinician_headers, json={"query": "core work"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["query"] == "core work"
        assert [e["id"] for e in data["exercises"]] == ["ex3", "ex1"]
        assert "Query: core work" in _prompt(mock_llm_router)

    @pytest.mark.asyncio
    async def test_unusable_answer_is_empty(self, client: AsyncClient, clinician_headers, mock_llm_router):
        mock_llm_router.complete_structured.side_effect = LLMValidationError("not json")
        resp = await client.post(f"{AI}/exercise-search", headers=clinician_headers, json={"query": "knees"})
        assert resp.json()["names"] == []
        assert resp.json()["exercises"] == []

    @pytest.mark.asyncio
    async def test_empty_query(self, client: AsyncClient, clinician_headers):
        resp = await client.post(f"{AI}/exercise-search", headers=clinician_headers, json={"query": ""})
        assert resp.status_code == 422


class TestProgramBuilder:
    @pytest.mark.asyncio
    async def test_resolves_suggestions(self, client: AsyncClient, clinician_headers, mock_llm_router):
        mock_llm_router.complete_structured.return_value = ProgramBuilderOutput(
            suggested_exercises=["Standard Squat", "Wall Sit", "Hamstring Stretch"],
            suggested_parameters=["Sets: 3, Reps: 10", "Sets: 2, Duration: 30s", "Sets: 2, Hold: 30s, Rest: 60s"],
        )
        resp = await client.post(
            f"{AI}/program-builder",
            headers=clinician_headers,
            json={"patient_conditions": "patellofemoral pain", "exercise_library": "Push Up"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["unmatched"] == ["Wall Sit"]
        squat, stretch = data["exercises"]
        assert (squat["exercise_id"], squat["sets"], squat["reps"]) == ("ex1", 3, 10)
        assert (stretch["exercise_id"], stretch["sets"], stretch["rest"]) == ("ex5", 2, "60s")

        prompt = _prompt(mock_llm_router)
        assert "Plank" in prompt
        assert "Push Up" not in prompt
        assert "Patient Conditions: patellofemoral pain" in prompt

    @pytest.mark.asyncio
    async def test_padded_names_still_match(self, client: AsyncClient, clinician_headers, mock_llm_router):
        mock_llm_router.complete_structured.return_value = ProgramBuilderOutput(
            suggested_exercises=[" Plank", "Standard Squat  "],
            suggested_parameters=["Sets: 3, Duration: 30s", "Sets: 3, Reps: 12"],
        )
        resp = await client.post(
            f"{AI}/program-builder",
            headers=clinician_headers,
            json={"patient_conditions": "core weakness", "exercise_library": ""},
        )
        data = resp.json()
        assert data["unmatched"] == []
        assert [e["exercise_id"] for e in data["exercises"]] == ["ex3", "ex1"]

    @pytest.mark.asyncio
    async def test_disabled_by_settings(self, client: AsyncClient, admin_headers, clinician_headers):
        await client.patch("/api/v1/settings", headers=admin_headers, json={"enable_ai_suggestions": False})
        resp = await client.post(
            f"{AI}/program-builder",
            headers=clinician_headers,
            json={"patient_conditions": "neck pain", "exercise_library": ""},
        )
        assert resp.status_code == 403
        assert resp.json()["detail"] == "AI suggestions are disabled"

    @pytest.mark.asyncio
    async def test_patients_cannot_build(self, client: AsyncClient, patient_headers):
        resp = await client.post(
            f"{AI}/program-builder", headers=patient_headers, json={"exercise_library": ""}
        )
        assert resp.status_code == 403


class TestFeedbackValidation:
    @pytest.mark.asyncio
    async def test_validate(self, client: AsyncClient, patient_headers, mock_llm_router):
        mock_llm_router.complete_structured.return_value = FeedbackValidationOutput(
            is_valid=False, suggestions="Where was the pain?"
        )
        resp = await client.post(
            f"{AI}/feedback-validate",
            headers=patient_headers,
            json={"exercise_name": "Plank", "pain_level": 8, "comments": "hurts"},
        )
        assert resp.json() == {"is_valid": False, "suggestions": "Where was the pain?"}
        assert 'Patient Comments: "hurts"' in _prompt(mock_llm_router)

    @pytest.mark.asyncio
    async def test_unusable_answer_accepts_feedback(self, client: AsyncClient, patient_headers, mock_llm_router):
        mock_llm_router.complete_structured.side_effect = LLMValidationError("bad json")
        resp = await client.post(
            f"{AI}/feedback-validate",
            headers=patient_headers,
            json={"exercise_name": "Plank", "pain_level": 2},
        )
        assert resp.json()["is_valid"] is True


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_limit_applies(self, client: AsyncClient, clinician_headers, mock_llm_router, monkeypatch):
        monkeypatch.setattr(ai_rate_limiter, "max_requests", 2)
        mock_llm_router.complete_structured.return_value = ExerciseSearchOutput(results=[])

        for _ in range(2):
            resp = await client.post(f"{AI}/exercise-search", headers=clinician_headers, json={"query": "hips"})
            assert resp.status_code == 200

        resp = await client.post(f"{AI}/exercise-search", headers=clinician_headers, json={"query": "hips"})
        assert resp.status_code == 429
        assert "Retry-After" in resp.headers
