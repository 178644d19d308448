"""Tests for clinician and patient messaging."""

import pytest
from httpx import AsyncClient

from physiopro.api.routes.messaging import preview

MESSAGES = "/api/v1/messages"


class TestPreview:
    def test_short_content_untouched(self):
        assert preview("See you Monday") == "See you Monday"

    def test_long_content_truncated(self):
        text = "x" * 45
        assert preview(text) == "x" * 30 + "..."

    def test_exact_length_untouched(self):
        assert preview("y" * 30) == "y" * 30


class TestConversations:
    @pytest.mark.asyncio
    async def test_clinician_conversations(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{MESSAGES}/conversations", headers=clinician_headers)
        assert resp.status_code == 200
        convs = resp.json()
        assert [c["counterpart_id"] for c in convs] == ["p1", "p2", "p3"]

        alice = convs[0]
        assert alice["counterpart_name"] == "Alice Green"
        assert alice["unread_count"] == 3
        assert alice["last_message"] == "Okay, I'll try that stretch."

    @pytest.mark.asyncio
    async def test_patient_sees_own_clinician(self, client: AsyncClient, patient_headers):
        resp = await client.get(f"{MESSAGES}/conversations", headers=patient_headers)
        convs = resp.json()
        assert len(convs) == 1
        assert convs[0]["counterpart_id"] == "doc_current"
        assert convs[0]["counterpart_name"] == "Dr. Clinician (Demo)"
        assert convs[0]["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_admin_cannot_message(self, client: AsyncClient, admin_headers):
        resp = await client.get(f"{MESSAGES}/conversations", headers=admin_headers)
        assert resp.status_code == 403


class TestThreads:
    @pytest.mark.asyncio
    async def test_reading_marks_incoming_read(self, client: AsyncClient, clinician_headers):
        resp = await client.get(f"{MESSAGES}/p1", headers=clinician_headers)
        assert resp.status_code == 200
        assert [m["id"] for m in resp.json()] == ["msg1", "msg2", "msg3", "msg4", "msg5"]

        convs = await client.get(f"{MESSAGES}/conversations", headers=clinician_headers)
        alice = next(c for c in convs.json() if c["counterpart_id"] == "p1")
        assert alice["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_unrelated_thread_is_hidden(self, client: AsyncClient):
        resp = await client.get(f"{MESSAGES}/p1", headers={"X-User-Id": "doc1"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_patient_reply_round_trip(self, client: AsyncClient, patient_headers, clinician_headers):
        resp = await client.post(
            MESSAGES,
            headers=patient_headers,
            json={"receiver_id": "doc_current", "content": "The reduced reps work much better, thank you!"},
        )
        assert resp.status_code == 201
        assert resp.json()["sender_id"] == "p1"
        assert resp.json()["is_read"] is False

        convs = await client.get(f"{MESSAGES}/conversations", headers=clinician_headers)
        alice = convs.json()[0]
        assert alice["counterpart_id"] == "p1"
        assert alice["last_message"] == "The reduced reps work much bet..."
        assert alice["unread_count"] == 4

    @pytest.mark.asyncio
    async def test_patient_cannot_message_other_clinician(self, client: AsyncClient, patient_headers):
        resp = await client.post(MESSAGES, headers=patient_headers, json={"receiver_id": "doc1", "content": "Hi"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, client: AsyncClient, clinician_headers):
        resp = await client.post(MESSAGES, headers=clinician_headers, json={"receiver_id": "p1", "content": ""})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_patient_messaging_switch(self, client: AsyncClient, admin_headers, patient_headers):
        await client.patch("/api/v1/settings", headers=admin_headers, json={"enable_patient_messaging": False})

        resp = await client.post(
            MESSAGES, headers=patient_headers, json={"receiver_id": "doc_current", "content": "Hello?"}
        )
        assert resp.status_code == 403
