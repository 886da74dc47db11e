"""Integration tests for /api/v1/auth endpoints."""

from httpx import AsyncClient

SIGNUP = "/api/v1/auth/signup"
LOGIN = "/api/v1/auth/login"
ME = "/api/v1/auth/me"


async def _signup(client: AsyncClient, **overrides):
    body = {
        "email": "kid@example.com",
        "password": "SecurePass123",
        "display_name": "Kid",
        "role": "student",
        "grade_level": 2,
    }
    body.update(overrides)
    return await client.post(SIGNUP, json=body)


class TestAuthAPI:
    """Signup, login and profile over HTTP."""

    async def test_signup_returns_token(self, client: AsyncClient):
        response = await _signup(client)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert data["user"]["email"] == "kid@example.com"
        assert data["user"]["grade_level"] == 2

        me = await client.get(ME, headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["role"] == "student"

    async def test_duplicate_email(self, client: AsyncClient):
        await _signup(client)
        response = await _signup(client, email="KID@example.com")

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_failed"
        assert response.json()["code"] == "email_taken"

    async def test_student_without_grade(self, client: AsyncClient):
        response = await _signup(client, grade_level=None)
        assert response.status_code == 400

    async def test_grade_out_of_range_is_schema_error(self, client: AsyncClient):
        response = await _signup(client, grade_level=13)

        assert response.status_code == 422
        body = response.json()
        assert body["kind"] == "validation_failed"
        assert any(e["field"].endswith("grade_level") for e in body["errors"])

    async def test_login(self, client: AsyncClient):
        await _signup(client)

        ok = await client.post(LOGIN, json={"email": "kid@example.com", "password": "SecurePass123"})
        bad = await client.post(LOGIN, json={"email": "kid@example.com", "password": "wrong-pass"})

        assert ok.status_code == 200
        assert "access_token" in ok.json()
        assert bad.status_code == 401
        assert bad.json()["kind"] == "not_authenticated"
        assert bad.headers["WWW-Authenticate"] == "Bearer"

    async def test_missing_and_bad_tokens(self, client: AsyncClient):
        missing = await client.get(ME)
        garbage = await client.get(ME, headers={"Authorization": "Bearer not-a-token"})

        assert missing.status_code == 401
        assert missing.json()["detail"] == "Not authenticated"
        assert garbage.status_code == 401

    async def test_profile_update(self, client: AsyncClient):
        token = (await _signup(client)).json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = await client.patch("/api/v1/auth/profile", json={"grade_level": 5}, headers=headers)

        assert response.status_code == 200
        assert response.json()["grade_level"] == 5

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get(ME, headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["request_id"] == "req-123"
