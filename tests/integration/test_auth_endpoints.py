"""
Integration tests for the authentication endpoints.
Drives the FastAPI app over httpx with SQLite and the in-memory code store.
"""
import pytest

from account_auth.interfaces.notifier_interface import NotificationKind

EMAIL = "user@example.com"
PASSWORD = "secret123"

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def _register(client, email=EMAIL, password=PASSWORD, **extra):
    return await client.post("/auth/register", json={"email": email, "password": password, **extra})


async def _verification_code(dispatcher, notifier, email=EMAIL):
    await dispatcher.drain()
    return notifier.last_code(email, NotificationKind.EMAIL_VERIFICATION)


async def _verified_account(client, dispatcher, notifier, email=EMAIL):
    await _register(client, email=email)
    code = await _verification_code(dispatcher, notifier, email)
    response = await client.post("/auth/verify-email", json={"email": email, "otp": code})
    assert response.status_code == 200


class TestRegistration:

    async def test_register(self, client):
        response = await _register(client, firstName="Ada", lastName="Lovelace")

        assert response.status_code == 201
        assert response.json() == {"message": "User registered. Please check email for OTP."}

    async def test_duplicate_registration(self, client):
        await _register(client)
        response = await _register(client)

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["statusCode"] == 409
        assert body["error"] == "ConflictError"
        assert body["errorCode"] == "CONFLICT"
        assert body["message"] == "User already exists"
        assert body["path"] == "/auth/register"
        assert body["correlationId"] == response.headers["X-Correlation-Id"]

    async def test_short_password_is_rejected(self, client):
        response = await _register(client, password="12345")

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert response.json()["errorCode"] == "VALIDATION_ERROR"

    async def test_invalid_email_is_rejected(self, client):
        response = await _register(client, email="not-an-email")

        assert response.status_code == 400


class TestFullFlow:

    async def test_register_verify_login_refresh(self, client, dispatcher, notifier):
        assert (await _register(client)).status_code == 201
        code = await _verification_code(dispatcher, notifier)
        assert code is not None and len(code) == 6

        verify = await client.post("/auth/verify-email", json={"email": EMAIL, "otp": code})
        assert verify.status_code == 200
        assert verify.json() == {"message": "Email verified successfully"}

        login = await client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert login.status_code == 200
        tokens = login.json()
        assert set(tokens) == {"access_token", "refresh_token", "user"}
        assert tokens["user"]["email"] == EMAIL
        assert tokens["user"]["role"] == "USER"
        assert "password_hash" not in tokens["user"]

        refresh = await client.post("/auth/refresh", json={"refreshToken": tokens["refresh_token"]})
        assert refresh.status_code == 200
        assert refresh.json()["user"] == tokens["user"]

    async def test_me_returns_token_claims(self, client, dispatcher, notifier):
        await _verified_account(client, dispatcher, notifier)
        login = await client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        access_token = login.json()["access_token"]

        response = await client.get("/auth/me", headers={"Authorization": f"Bearer {access_token}"})

        assert response.status_code == 200
        identity = response.json()
        assert identity["sub"] == login.json()["user"]["id"]
        assert identity["email"] == EMAIL
        assert identity["isVerified"] is True
        assert identity["exp"] > identity["iat"]

    async def test_me_without_token(self, client):
        response = await client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "UnauthenticatedError"
        assert response.json()["errorCode"] == "UNAUTHENTICATED"

    async def test_me_with_garbage_token(self, client):
        response = await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401


class TestLogin:

    async def test_unverified_login(self, client):
        await _register(client)

        response = await client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})

        assert response.status_code == 401
        assert response.json()["message"] == "Email not verified"

    async def test_wrong_password_and_unknown_email_look_the_same(self, client, dispatcher, notifier):
        await _verified_account(client, dispatcher, notifier)

        wrong = await client.post("/auth/login", json={"email": EMAIL, "password": "nope-nope"})
        unknown = await client.post("/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"] == "Invalid credentials"


class TestVerification:

    async def test_wrong_code(self, client, dispatcher, notifier):
        await _register(client)
        code = await _verification_code(dispatcher, notifier)
        wrong = "100000" if code != "100000" else "100001"

        response = await client.post("/auth/verify-email", json={"email": EMAIL, "otp": wrong})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired OTP"
        assert response.json()["errorCode"] == "INVALID_OR_EXPIRED_CODE"

    async def test_second_use_of_a_code_fails(self, client, dispatcher, notifier):
        await _register(client)
        code = await _verification_code(dispatcher, notifier)
        await client.post("/auth/verify-email", json={"email": EMAIL, "otp": code})

        response = await client.post("/auth/verify-email", json={"email": EMAIL, "otp": code})

        assert response.status_code == 400

    async def test_code_expires(self, client, dispatcher, notifier, clock):
        await _register(client)
        code = await _verification_code(dispatcher, notifier)
        clock.advance(301)

        response = await client.post("/auth/verify-email", json={"email": EMAIL, "otp": code})

        assert response.status_code == 400


class TestPasswordReset:

    async def test_forgot_password_response_does_not_reveal_existence(self, client, dispatcher, notifier):
        await _verified_account(client, dispatcher, notifier)

        known = await client.post("/auth/forgot-password", json={"email": EMAIL})
        unknown = await client.post("/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json() == {"message": "If email exists, OTP sent"}

        await dispatcher.drain()
        assert notifier.last_code("ghost@example.com", NotificationKind.PASSWORD_RESET) is None
        assert notifier.last_code(EMAIL, NotificationKind.PASSWORD_RESET) is not None

    async def test_reset_then_login(self, client, dispatcher, notifier):
        await _verified_account(client, dispatcher, notifier)
        await client.post("/auth/forgot-password", json={"email": EMAIL})
        await dispatcher.drain()
        code = notifier.last_code(EMAIL, NotificationKind.PASSWORD_RESET)

        reset = await client.post(
            "/auth/reset-password",
            json={"email": EMAIL, "otp": code, "newPassword": "new-secret"},
        )
        assert reset.status_code == 200
        assert reset.json() == {"message": "Password reset successfully"}

        old = await client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        new = await client.post("/auth/login", json={"email": EMAIL, "password": "new-secret"})
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_reset_with_verification_code_fails(self, client, dispatcher, notifier):
        await _register(client)
        code = await _verification_code(dispatcher, notifier)

        response = await client.post(
            "/auth/reset-password",
            json={"email": EMAIL, "otp": code, "newPassword": "new-secret"},
        )

        assert response.status_code == 400


class TestRefresh:

    async def test_invalid_refresh_token(self, client):
        response = await client.post("/auth/refresh", json={"refreshToken": "garbage"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid refresh token"


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_unknown_route_uses_error_shape(client):
    response = await client.get("/auth/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "NotFound"
    assert body["errorCode"] == "HTTP_404"
