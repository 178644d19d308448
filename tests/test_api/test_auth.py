"""Tests for login, sign-up and the cookie session."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from physiopro.api.routes.auth import RESET_MESSAGE
from physiopro.core.auth import ACCESS_COOKIE

DEMO_PASSWORD = "PhysioPro!2024"
STRONG_PASSWORD = "Str0ng!Pass"


@pytest_asyncio.fixture
async def cookie_client(app):
    """Client that goes through the real cookie authentication."""
    from physiopro.api.dependencies import get_current_user

    app.dependency_overrides.pop(get_current_user, None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def _signup_body(**overrides) -> dict:
    body = {
        "full_name": "Dr. Nora Quinn",
        "email": "nora.quinn@clinic.dev",
        "password": STRONG_PASSWORD,
        "confirm_password": STRONG_PASSWORD,
        "role": "Physiotherapist",
        "terms": True,
    }
    body.update(overrides)
    return body


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_sets_cookie_and_me_works(self, cookie_client: AsyncClient):
        resp = await cookie_client.post(
            "/api/v1/auth/login",
            json={"email": "dr.clinician@physiopro.app", "password": DEMO_PASSWORD},
        )
        assert resp.status_code == 200
        assert resp.json()["id"] == "doc_current"
        assert ACCESS_COOKIE in resp.cookies

        me = await cookie_client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "dr.clinician@physiopro.app"

    @pytest.mark.asyncio
    async def test_wrong_password(self, cookie_client: AsyncClient):
        resp = await cookie_client.post(
            "/api/v1/auth/login",
            json={"email": "dr.clinician@physiopro.app", "password": "nope"},
        )
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email(self, cookie_client: AsyncClient):
        resp = await cookie_client.post(
            "/api/v1/auth/login",
            json={"email": "ghost@example.com", "password": DEMO_PASSWORD},
        )
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_suspended_account_refused(self, cookie_client: AsyncClient):
        resp = await cookie_client.post(
            "/api/v1/auth/login",
            json={"email": "usman@brainclinic.com", "password": DEMO_PASSWORD},
        )
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Account is suspended"

    @pytest.mark.asyncio
    async def test_me_without_cookie(self, cookie_client: AsyncClient):
        resp = await cookie_client.get("/api/v1/auth/me")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_clears_session(self, cookie_client: AsyncClient):
        await cookie_client.post(
            "/api/v1/auth/login",
            json={"email": "alice.admin@physiopro.app", "password": DEMO_PASSWORD},
        )
        resp = await cookie_client.post("/api/v1/auth/logout")
        assert resp.json() == {"ok": True}

        me = await cookie_client.get("/api/v1/auth/me")
        assert me.status_code == 401


class TestSignup:
    @pytest.mark.asyncio
    async def test_clinician_signup_starts_on_trial(self, client: AsyncClient, admin_headers):
        resp = await client.post("/api/v1/auth/signup", json=_signup_body())
        assert resp.status_code == 201
        new_id = resp.json()["id"]

        detail = await client.get(f"/api/v1/clinicians/{new_id}", headers=admin_headers)
        assert detail.json()["status"] == "active"
        assert detail.json()["subscription_status"] == "trial"
        assert detail.json()["city"] == "Not Specified"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/auth/signup", json=_signup_body(email="dr.clinician@physiopro.app")
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["short1!", "alllower1!", "ALLUPPER1!", "NoDigits!!", "NoSpecial12"])
    async def test_weak_passwords_rejected(self, client: AsyncClient, password):
        resp = await client.post(
            "/api/v1/auth/signup",
            json=_signup_body(password=password, confirm_password=password),
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_mismatched_passwords(self, client: AsyncClient):
        resp = await client.post("/api/v1/auth/signup", json=_signup_body(confirm_password="Other!Pass1"))
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_terms_required(self, client: AsyncClient):
        resp = await client.post("/api/v1/auth/signup", json=_signup_body(terms=False))
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_non_professional_role_rejected(self, client: AsyncClient):
        resp = await client.post("/api/v1/auth/signup", json=_signup_body(role="Admin"))
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_patient_signup_creates_record_and_welcome(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/auth/patient-signup",
            json={
                "full_name": "Pat Newman",
                "email": "pat.newman@example.com",
                "password": STRONG_PASSWORD,
                "confirm_password": STRONG_PASSWORD,
                "whatsapp_number": "+15550001111",
                "terms": True,
            },
        )
        assert resp.status_code == 201
        user_id = resp.json()["id"]
        assert resp.json()["role"] == "Patient"

        inbox = await client.get("/api/v1/notifications", headers={"X-User-Id": user_id})
        titles = [n["title"] for n in inbox.json()]
        assert "Welcome to PhysioPro!" in titles

    @pytest.mark.asyncio
    async def test_patient_signup_bad_whatsapp(self, client: AsyncClient):
        resp = await client.post(
            "/api/v1/auth/patient-signup",
            json={
                "full_name": "Pat Newman",
                "email": "pat.newman@example.com",
                "password": STRONG_PASSWORD,
                "confirm_password": STRONG_PASSWORD,
                "whatsapp_number": "0123",
                "terms": True,
            },
        )
        assert resp.status_code == 422


class TestForgotPassword:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["dr.clinician@physiopro.app", "nobody@example.com"])
    async def test_same_answer_for_any_email(self, client: AsyncClient, email):
        resp = await client.post("/api/v1/auth/forgot-password", json={"email": email})
        assert resp.status_code == 200
        assert resp.json() == {"message": RESET_MESSAGE}
