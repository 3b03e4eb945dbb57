"""
Tests for registration, email verification, login, logout and password reset.
"""

from jobboard.core.auth import (
    PURPOSE_RESET_PASSWORD, PURPOSE_VERIFY_EMAIL, create_access_token, create_action_token
)
from jobboard.core import emailer
from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.services.auth_service import AuthService

from tests.conftest import PASSWORD


def _login(client, email, password=PASSWORD, **extra):
    return client.post("/api/auth/login", json={"email": email, "password": password, **extra})


class TestRegister:

    def test_register_creates_unverified_account_and_profile(self, client):
        response = client.post("/api/auth/register", json={
            "email": "New.User@acme.io", "password": PASSWORD,
            "role": "jobseeker", "full_name": "New User"
        })
        assert response.status_code == 201
        assert "verify" in response.json()["message"].lower()

        profile = get_collection(COLLECTIONS["profiles"]).find_one({"email": "new.user@acme.io"})
        assert profile["role"] == "jobseeker"
        assert profile["full_name"] == "New User"
        assert profile["email_verified"] is False

    def test_register_duplicate_email_conflicts(self, client, register_user):
        register_user("jobseeker", email="dup@acme.io")
        response = client.post("/api/auth/register", json={
            "email": "DUP@acme.io", "password": PASSWORD, "role": "employer"
        })
        assert response.status_code == 409

    def test_register_rejects_short_password(self, client):
        response = client.post("/api/auth/register", json={
            "email": "short@acme.io", "password": "123", "role": "jobseeker"
        })
        assert response.status_code == 422

    def test_register_rejects_unknown_role(self, client):
        response = client.post("/api/auth/register", json={
            "email": "admin@acme.io", "password": PASSWORD, "role": "admin"
        })
        assert response.status_code == 422

    def test_register_survives_mail_outage(self, client, monkeypatch):
        def unreachable(host, port):
            raise ConnectionRefusedError(f"{host}:{port} refused")

        monkeypatch.setattr(get_settings(), "smtp_host", "127.0.0.1")
        monkeypatch.setattr(get_settings(), "smtp_port", 1)
        monkeypatch.setattr(emailer.smtplib, "SMTP", unreachable)

        payload = {"email": "offline@acme.io", "password": PASSWORD, "role": "jobseeker"}
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201
        assert get_collection(COLLECTIONS["profiles"]).find_one({"email": "offline@acme.io"}) is not None

        # Retrying is a plain duplicate; the account is there for resend-verification
        assert client.post("/api/auth/register", json=payload).status_code == 409


class TestLogin:

    def test_login_before_verification_is_refused(self, client, register_user):
        user = register_user("jobseeker", verify=False)
        response = _login(client, user["email"])
        assert response.status_code == 403
        assert "not verified" in response.json()["detail"]

    def test_login_after_verification_returns_token_and_profile(self, client, register_user):
        user = register_user("employer", company_name="Acme Corp")
        response = _login(client, user["email"])
        assert response.status_code == 200

        body = response.json()
        assert body["user_id"] == user["user_id"]
        assert body["role"] == "employer"
        assert body["token_type"] == "bearer"
        assert body["user_data"]["company_name"] == "Acme Corp"
        assert body["user_data"]["email_verified"] is True

    def test_login_wrong_password(self, client, register_user):
        user = register_user()
        response = _login(client, user["email"], password="wrong-password")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_unknown_email(self, client):
        response = _login(client, "ghost@acme.io")
        assert response.status_code == 401

    def test_login_role_mismatch(self, client, register_user):
        user = register_user("jobseeker")
        response = _login(client, user["email"], expected_role="employer")
        assert response.status_code == 403
        assert response.json()["detail"] == "User role mismatch. Expected role: employer."

    def test_login_with_matching_expected_role(self, client, register_user):
        user = register_user("jobseeker")
        response = _login(client, user["email"], expected_role="jobseeker")
        assert response.status_code == 200

    def test_login_without_profile_document(self, client, register_user):
        user = register_user("jobseeker")
        get_collection(COLLECTIONS["profiles"]).delete_one({"_id": user["user_id"]})
        response = _login(client, user["email"])
        assert response.status_code == 404
        assert response.json()["detail"] == "User data not found."

    def test_login_email_is_case_insensitive(self, client, register_user):
        user = register_user("jobseeker", email="mixed@acme.io")
        response = _login(client, "MIXED@acme.io")
        assert response.status_code == 200
        assert response.json()["user_id"] == user["user_id"]


class TestVerification:

    def test_verify_email_link(self, client, register_user):
        user = register_user(verify=False)
        token = create_action_token(user["user_id"], PURPOSE_VERIFY_EMAIL)

        response = client.get("/api/auth/verify-email", params={"token": token})
        assert response.status_code == 200
        assert _login(client, user["email"]).status_code == 200

    def test_verify_email_rejects_reset_token(self, client, register_user):
        user = register_user(verify=False)
        token = create_action_token(user["user_id"], PURPOSE_RESET_PASSWORD)
        response = client.post("/api/auth/verify-email", json={"token": token})
        assert response.status_code == 400

    def test_verify_email_rejects_garbage(self, client):
        response = client.post("/api/auth/verify-email", json={"token": "not-a-jwt"})
        assert response.status_code == 400

    def test_resend_verification(self, client, register_user):
        user = register_user(verify=False)
        response = client.post("/api/auth/resend-verification",
                               json={"email": user["email"], "password": PASSWORD})
        assert response.status_code == 200

    def test_resend_verification_when_already_verified(self, client, register_user):
        user = register_user()
        response = client.post("/api/auth/resend-verification",
                               json={"email": user["email"], "password": PASSWORD})
        assert response.status_code == 400

    def test_email_verified_flag(self, client, make_user):
        user = make_user()
        response = client.get("/api/auth/email-verified", headers=user["headers"])
        assert response.json() == {"email_verified": True}

    def test_verification_link_works_once(self, client, register_user):
        user = register_user(verify=False)
        token = create_action_token(user["user_id"], PURPOSE_VERIFY_EMAIL)

        assert client.post("/api/auth/verify-email", json={"token": token}).status_code == 200
        assert client.post("/api/auth/verify-email", json={"token": token}).status_code == 400


class TestSession:

    def test_me(self, client, make_user):
        user = make_user("employer")
        response = client.get("/api/auth/me", headers=user["headers"])
        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == user["user_id"]
        assert body["email"] == user["email"]
        assert body["role"] == "employer"
        assert body["email_verified"] is True

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code in (401, 403)

    def test_me_rejects_bad_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_action_token_is_not_an_access_token(self, client, make_user):
        user = make_user()
        token = create_action_token(user["user_id"], PURPOSE_VERIFY_EMAIL)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_account(self, client):
        token = create_access_token({"sub": "missing-user", "role": "jobseeker"})
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, make_user):
        user = make_user()
        assert client.post("/api/auth/logout", headers=user["headers"]).status_code == 200
        assert client.get("/api/auth/me", headers=user["headers"]).status_code == 401

    def test_logout_keeps_other_sessions(self, client, make_user):
        user = make_user()
        second = _login(client, user["email"]).json()["access_token"]
        client.post("/api/auth/logout", headers=user["headers"])

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {second}"})
        assert response.status_code == 200


class TestPasswordReset:

    def test_reset_unknown_email_reports_success(self, client):
        response = client.post("/api/auth/password-reset", json={"email": "nobody@acme.io"})
        assert response.status_code == 200

    def test_reset_flow(self, client, register_user):
        user = register_user()
        assert client.post("/api/auth/password-reset", json={"email": user["email"]}).status_code == 200

        token = create_action_token(user["user_id"], PURPOSE_RESET_PASSWORD)
        response = client.post("/api/auth/password-reset/confirm",
                               json={"token": token, "new_password": "brand-new-pass"})
        assert response.status_code == 200

        assert _login(client, user["email"]).status_code == 401
        assert _login(client, user["email"], password="brand-new-pass").status_code == 200

    def test_reset_rejects_verification_token(self, client, register_user):
        user = register_user()
        token = create_action_token(user["user_id"], PURPOSE_VERIFY_EMAIL)
        response = client.post("/api/auth/password-reset/confirm",
                               json={"token": token, "new_password": "brand-new-pass"})
        assert response.status_code == 400

    def test_reset_link_works_once(self, client, register_user):
        user = register_user()
        token = create_action_token(user["user_id"], PURPOSE_RESET_PASSWORD)
        url = "/api/auth/password-reset/confirm"

        assert client.post(url, json={"token": token, "new_password": "brand-new-pass"}).status_code == 200
        replay = client.post(url, json={"token": token, "new_password": "hijacked-pass"})
        assert replay.status_code == 400
        assert _login(client, user["email"], password="brand-new-pass").status_code == 200

    def test_reset_signs_out_existing_sessions(self, client, make_user):
        user = make_user()
        token = create_action_token(user["user_id"], PURPOSE_RESET_PASSWORD)
        client.post("/api/auth/password-reset/confirm",
                    json={"token": token, "new_password": "brand-new-pass"})

        assert client.get("/api/auth/me", headers=user["headers"]).status_code == 401

        fresh = _login(client, user["email"], password="brand-new-pass").json()["access_token"]
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {fresh}"})
        assert response.status_code == 200


class TestAuthService:

    def test_check_email_verified(self, register_user):
        service = AuthService()
        unverified = register_user(verify=False)
        verified = register_user()
        assert service.check_email_verified(unverified["user_id"]) is False
        assert service.check_email_verified(verified["user_id"]) is True
        assert service.check_email_verified("missing") is False
