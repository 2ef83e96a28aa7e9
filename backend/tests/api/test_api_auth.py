# tests/api/test_api_auth.py
from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD, UserFactory

AUTH = "/api/v1/auth"
PASSWORD = "Str0ngPass"


def _set_cookies(response) -> dict[str, str]:
    """Map cookie name -> raw ``Set-Cookie`` header."""
    return {h.split("=", 1)[0]: h for h in response.headers.getlist("Set-Cookie")}


def _register(client, email="ada@example.com", password=PASSWORD, **extra):
    return client.post(f"{AUTH}/register", json={"email": email, "password": password, **extra})


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post(f"{AUTH}/login", json={"email": email, "password": password})


@pytest.fixture()
def account(session):
    user = UserFactory(email="user@example.com")
    session.commit()
    return user


class TestRegister:
    def test_register_requires_verification(self, client, outbox):
        res = _register(client, email=" Ada@Example.com", name="Ada")

        assert res.status_code == 201
        body = res.get_json()["data"]
        assert body["status"] == "pending_verification"
        assert body["user"]["email"] == "ada@example.com"
        assert body["user"]["email_verified"] is False
        assert "password" not in body["user"]
        assert "password_hash" not in body["user"]
        assert _set_cookies(res) == {}
        assert outbox.last("verification").email == "ada@example.com"

    def test_register_duplicate_is_409(self, client, outbox):
        _register(client)
        res = _register(client, email="ADA@example.com")

        assert res.status_code == 409
        assert res.mimetype == "application/problem+json"
        assert res.get_json()["code"] == "conflict"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "password": PASSWORD},
            {"email": "a@example.com", "password": "short"},
            {"email": "a@example.com", "password": "alllowercase1"},
            {"email": "a@example.com"},
        ],
    )
    def test_register_validation_is_400(self, client, payload):
        res = client.post(f"{AUTH}/register", json=payload)

        assert res.status_code == 400
        assert res.get_json()["code"] == "validation_error"


class TestLogin:
    def test_login_sets_httponly_cookies(self, client, account):
        res = _login(client, "user@example.com")

        assert res.status_code == 200
        assert res.get_json()["data"]["user"]["id"] == account.id
        cookies = _set_cookies(res)
        assert set(cookies) == {"access_token", "refresh_token"}
        for header in cookies.values():
            assert "HttpOnly" in header
            assert "Path=/" in header
            assert "SameSite=Lax" in header
        assert "Max-Age=900" in cookies["access_token"]
        assert "Max-Age=604800" in cookies["refresh_token"]

    def test_login_unknown_and_wrong_password_look_the_same(self, client, account):
        unknown = _login(client, "ghost@example.com")
        wrong = _login(client, "user@example.com", "Wr0ngPassword")

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.get_json()["detail"] == wrong.get_json()["detail"]

    def test_login_unverified_is_403(self, client, session):
        UserFactory(email="pending@example.com", email_verified=False)
        session.commit()

        res = _login(client, "pending@example.com")

        assert res.status_code == 403
        assert res.get_json()["code"] == "verification_required"


class TestSessionFlow:
    def test_register_verify_login_profile(self, client, outbox):
        """
        GIVEN a new registration
        WHEN the emailed link is opened and the user logs in
        THEN the profile endpoint returns the verified account
        """
        _register(client)
        token = outbox.last("verification").token

        verified = client.get(f"{AUTH}/verify-email", query_string={"token": token})
        assert verified.status_code == 200
        assert verified.get_json()["data"]["user"]["email_verified"] is True

        again = client.get(f"{AUTH}/verify-email", query_string={"token": token})
        assert again.status_code == 400

        assert _login(client, "ada@example.com", PASSWORD).status_code == 200
        profile = client.get(f"{AUTH}/profile")
        assert profile.status_code == 200
        assert profile.get_json()["data"]["user"]["email"] == "ada@example.com"
        assert client.get(f"{AUTH}/me").status_code == 200

    def test_verify_email_without_token(self, client):
        res = client.get(f"{AUTH}/verify-email")
        assert res.status_code == 400
        assert res.get_json()["detail"] == "Token is required"

    def test_refresh_then_logout_revokes(self, client, account):
        _login(client, "user@example.com")
        refresh_token = client.get_cookie("refresh_token").value

        refreshed = client.post(f"{AUTH}/refresh")
        assert refreshed.status_code == 200
        assert refreshed.get_json()["data"]["message"] == "refreshed"
        assert set(_set_cookies(refreshed)) == {"access_token"}

        out = client.post(f"{AUTH}/logout")
        assert out.status_code == 200
        assert client.get_cookie("access_token") is None
        assert client.get_cookie("refresh_token") is None

        replay = client.post(f"{AUTH}/refresh", json={"refresh_token": refresh_token})
        assert replay.status_code == 401

    def test_refresh_without_token_is_401(self, client):
        assert client.post(f"{AUTH}/refresh").status_code == 401

    def test_bearer_header_is_accepted(self, client, account, app):
        from authcore.container import services

        with app.app_context():
            token = services().issuer.mint_access(account.id).token

        res = client.get(f"{AUTH}/profile", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 200

    def test_refresh_token_is_not_an_access_token(self, client, account):
        _login(client, "user@example.com")
        refresh_token = client.get_cookie("refresh_token").value
        client.delete_cookie("access_token")

        res = client.get(f"{AUTH}/profile", headers={"Authorization": f"Bearer {refresh_token}"})

        assert res.status_code == 401

    def test_protected_routes_require_a_token(self, client):
        assert client.get(f"{AUTH}/profile").status_code == 401
        assert client.post(f"{AUTH}/logout").status_code == 401


class TestProfile:
    def test_update_profile(self, client, account, session):
        UserFactory(email="taken@example.com")
        session.commit()
        _login(client, "user@example.com")

        res = client.put(f"{AUTH}/profile", json={"name": "  Renamed "})
        assert res.status_code == 200
        assert res.get_json()["data"]["user"]["name"] == "Renamed"

        conflict = client.put(f"{AUTH}/profile", json={"email": "taken@example.com"})
        assert conflict.status_code == 409

        empty = client.put(f"{AUTH}/profile", json={})
        assert empty.status_code == 400

    def test_email_change_requires_verifying_the_new_address(self, client, account, outbox):
        """
        GIVEN a verified, signed-in account
        WHEN the email is changed through the profile endpoint
        THEN the account is unverified until the link sent to the new address is opened
        """
        _login(client, "user@example.com")

        res = client.put(f"{AUTH}/profile", json={"email": "moved@example.com"})
        assert res.status_code == 200
        user = res.get_json()["data"]["user"]
        assert user["email"] == "moved@example.com"
        assert user["email_verified"] is False

        message = outbox.last("verification")
        assert message.email == "moved@example.com"
        assert _login(client, "moved@example.com").status_code == 403

        verified = client.get(f"{AUTH}/verify-email", query_string={"token": message.token})
        assert verified.status_code == 200
        assert _login(client, "moved@example.com").status_code == 200

    def test_null_name_clears_it(self, client, account):
        _login(client, "user@example.com")
        client.put(f"{AUTH}/profile", json={"name": "Someone"})

        res = client.put(f"{AUTH}/profile", json={"name": None})

        assert res.status_code == 200
        assert res.get_json()["data"]["user"]["name"] is None


class TestPasswords:
    def test_change_password_signs_out(self, client, account):
        _login(client, "user@example.com")
        old_refresh = client.get_cookie("refresh_token").value

        wrong = client.put(
            f"{AUTH}/change-password",
            json={"currentPassword": "Nope12345", "newPassword": "N3wPass"},
        )
        assert wrong.status_code == 401

        res = client.put(
            f"{AUTH}/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "N3wPass"},
        )
        assert res.status_code == 200
        assert client.get_cookie("refresh_token") is None

        replay = client.post(f"{AUTH}/refresh", json={"refresh_token": old_refresh})
        assert replay.status_code == 401
        assert _login(client, "user@example.com", "N3wPass").status_code == 200

    def test_forgot_and_reset_password(self, client, account, outbox):
        unknown = client.post(f"{AUTH}/forgot-password", json={"email": "ghost@example.com"})
        known = client.post(f"{AUTH}/forgot-password", json={"email": "user@example.com"})

        assert unknown.status_code == known.status_code == 200
        assert unknown.get_json() == known.get_json()
        assert len(outbox.outbox) == 1

        res = client.post(
            f"{AUTH}/reset-password",
            json={"token": outbox.last("reset").token, "password": "Br4ndNewPass"},
        )
        assert res.status_code == 200
        assert _login(client, "user@example.com", "Br4ndNewPass").status_code == 200

    def test_reset_with_bad_token(self, client):
        res = client.post(
            f"{AUTH}/reset-password", json={"token": "garbage", "password": "Br4ndNewPass"}
        )
        assert res.status_code == 400
        assert res.get_json()["detail"] == "Invalid or expired token"

    def test_resend_verification_is_uniform(self, client, account, outbox):
        _register(client, email="new@example.com")
        outbox.outbox.clear()

        responses = [
            client.post(f"{AUTH}/resend-verification", json={"email": email})
            for email in ("ghost@example.com", "user@example.com", "new@example.com")
        ]

        assert {r.status_code for r in responses} == {200}
        assert len({r.get_data(as_text=True) for r in responses}) == 1
        assert [m.email for m in outbox.outbox] == ["new@example.com"]
