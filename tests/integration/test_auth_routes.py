"""
Integration tests for the /auth, /users and /dev routes.

The routers run inside a minimal FastAPI app whose lifespan wires an
IdentityService over the in-memory stores, so requests go through the real
DTOs, dependencies and error handlers without touching MongoDB.
"""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.auth_routes import router as auth_router
from routes.dev_routes import router as dev_router
from routes.user_routes import router as user_router

EMAIL = "a@x.com"
PASSWORD = "secret1"


@pytest.fixture
def client(identity, outbox):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.identity_service = identity
        app.state.email_provider = outbox
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(dev_router)
    with TestClient(app) as c:
        yield c


def _register(client, **extra):
    return client.post("/auth/register", json={"email": EMAIL, "password": PASSWORD, **extra})


def _sign_in(client, read_code) -> dict:
    _register(client)
    resp = client.post("/auth/verify-email", json={"email": EMAIL, "code": read_code(EMAIL)})
    assert resp.status_code == 200
    return resp.json()["tokens"]


def _bearer(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


class TestRegister:
    def test_created(self, client):
        resp = _register(client, name="Alice", mobileNumber="9876543210")
        assert resp.status_code == 201
        body = resp.json()
        assert body["user"]["email"] == EMAIL
        assert body["user"]["mobile_number"] == "9876543210"
        assert body["user"]["is_email_verified"] is False
        assert "password_hash" not in body["user"]
        assert body["verification_sent"] is True
        assert body["email_preview_url"].startswith("http://localhost:8000/dev/emails/")

    def test_duplicate_is_409(self, client):
        _register(client)
        resp = _register(client)
        assert resp.status_code == 409
        assert resp.json()["code"] == "conflict"

    def test_bad_mobile_is_400(self, client):
        resp = _register(client, mobileNumber="123")
        assert resp.status_code == 400
        assert resp.json()["field"] == "mobile_number"

    def test_missing_password_is_400(self, client):
        resp = client.post("/auth/register", json={"email": EMAIL})
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"


class TestVerifyAndLogin:
    def test_wrong_code_is_400(self, client, read_code):
        _register(client)
        code = read_code(EMAIL)
        wrong = "000000" if code != "000000" else "111111"
        resp = client.post("/auth/verify-email", json={"email": EMAIL, "otp": wrong})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_or_expired_code"

    def test_unverified_login_is_403(self, client):
        _register(client)
        resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 403
        assert resp.json()["code"] == "email_not_verified"

    def test_login_after_verification(self, client, read_code):
        _sign_in(client, read_code)
        resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["is_email_verified"] is True
        assert body["tokens"]["token_type"] == "bearer"

    def test_bad_credentials_is_401(self, client):
        resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials", "code": "invalid_credentials"}

    def test_resend(self, client):
        _register(client)
        resp = client.post("/auth/resend-verification", json={"email": EMAIL})
        assert resp.status_code == 200
        assert resp.json()["dispatched"] is True

    def test_resend_unknown_is_404(self, client):
        resp = client.post("/auth/resend-verification", json={"email": "nobody@x.com"})
        assert resp.status_code == 404


class TestTokens:
    def test_refresh_rotates_and_old_token_fails(self, client, read_code):
        tokens = _sign_in(client, read_code)

        resp = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert resp.status_code == 200
        assert resp.json()["tokens"]["refresh_token"] != tokens["refresh_token"]

        again = client.post("/auth/refresh", json={"refreshToken": tokens["refresh_token"]})
        assert again.status_code == 401
        assert again.json()["code"] == "invalid_refresh_token"

    def test_logout_then_repeat_is_400(self, client, read_code):
        tokens = _sign_in(client, read_code)
        first = client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})
        assert first.status_code == 200
        assert first.json()["success"] is True

        second = client.post("/auth/logout", json={"refresh_token": tokens["refresh_token"]})
        assert second.status_code == 400
        assert second.json()["code"] == "invalid_refresh_token"


class TestProfileRoutes:
    def test_me(self, client, read_code):
        tokens = _sign_in(client, read_code)
        resp = client.get("/users/me", headers=_bearer(tokens))
        assert resp.status_code == 200
        assert resp.json()["email"] == EMAIL

    def test_me_requires_token(self, client):
        resp = client.get("/users/me")
        assert resp.status_code == 401
        assert resp.json()["code"] == "authentication_error"

    def test_me_rejects_garbage_token(self, client):
        resp = client.get("/users/me", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_patch_ignores_email(self, client, read_code):
        tokens = _sign_in(client, read_code)
        resp = client.patch(
            "/users/me",
            headers=_bearer(tokens),
            json={"name": "Alice", "email": "evil@x.com", "mobileNumber": "9876543210"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"] == EMAIL
        assert body["name"] == "Alice"
        assert body["mobile_number"] == "9876543210"


class TestPasswordResetRoutes:
    def test_flow(self, client, read_code):
        _sign_in(client, read_code)
        assert client.post("/auth/request-password-reset", json={"email": EMAIL}).status_code == 200

        resp = client.post(
            "/auth/reset-password",
            json={"email": EMAIL, "code": read_code(EMAIL), "new_password": "newsecret"},
        )
        assert resp.status_code == 200

        login = client.post("/auth/login", json={"email": EMAIL, "password": "newsecret"})
        assert login.status_code == 200


class TestDevEmailPreview:
    def test_preview_renders_captured_email(self, client, read_code):
        url = _register(client).json()["email_preview_url"]
        message_id = url.rsplit("/", 1)[-1]
        resp = client.get(f"/dev/emails/{message_id}")
        assert resp.status_code == 200
        assert read_code(EMAIL) in resp.text

    def test_unknown_message_is_404(self, client):
        assert client.get("/dev/emails/missing").status_code == 404
