"""
Auth Service - registration, login and email flows.

Accounts live in the account store (users table); the matching profile
document lives in MongoDB under the same uid.

RULES:
- Registration never logs the user in; a verification email is sent.
- Login requires a verified email, an existing profile document and,
  when requested, a matching role.
- Password reset never reveals whether an email is registered.
"""

import logging
import smtplib
import uuid
from typing import Optional

from sqlalchemy import text

from jobboard.core.auth import (
    PURPOSE_RESET_PASSWORD, PURPOSE_VERIFY_EMAIL, create_access_token,
    create_action_token, decode_action_token, hash_password, revoke_token,
    verify_password
)
from jobboard.core.emailer import send_password_reset_email, send_verification_email
from jobboard.core.exceptions import (
    AuthenticationError, ConflictError, InvalidRequestError, NotFoundError, PermissionDeniedError
)
from jobboard.db.postgres import get_db_session
from jobboard.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:

    def __init__(self):
        self.profiles = ProfileService()

    def _get_account(self, email: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT user_id, email, password_hash, role, email_verified, is_active, token_version
                    FROM users WHERE email = :email
                """),
                {"email": email.lower()}
            )
            row = result.fetchone()
        if not row:
            return None
        return {
            "user_id": row[0], "email": row[1], "password_hash": row[2],
            "role": row[3], "email_verified": bool(row[4]), "is_active": bool(row[5]),
            "token_version": row[6] or 0
        }

    def _authenticate(self, email: str, password: str) -> dict:
        account = self._get_account(email)
        if not account or not verify_password(password, account["password_hash"]):
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not account["is_active"]:
            raise PermissionDeniedError("Account deactivated")
        return account

    def get_account(self, user_id: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT user_id, email, role, email_verified, is_active, created_at
                    FROM users WHERE user_id = :id
                """),
                {"id": user_id}
            )
            row = result.fetchone()
        if not row:
            return None
        return {
            "user_id": row[0], "email": row[1], "role": row[2],
            "email_verified": bool(row[3]), "is_active": bool(row[4]), "created_at": row[5]
        }

    def register_with_email(self, email: str, password: str, role: str,
                            additional_data: dict = None) -> str:
        """Create an unverified account and send the verification email. Returns the uid."""
        email = email.lower()
        if self._get_account(email):
            raise ConflictError("Email already registered")

        user_id = uuid.uuid4().hex
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO users (user_id, email, password_hash, role, email_verified, is_active)
                    VALUES (:user_id, :email, :password_hash, :role, :verified, :active)
                """),
                {
                    "user_id": user_id,
                    "email": email,
                    "password_hash": hash_password(password),
                    "role": role,
                    "verified": False,
                    "active": True,
                }
            )

        extra = {k: v for k, v in (additional_data or {}).items() if v is not None}
        self.profiles.create_profile(user_id, email, role, extra)

        logger.info("Registered %s as %s (%s)", email, role, user_id)

        # The account stands either way; the user can ask for a new link
        try:
            send_verification_email(email, create_action_token(user_id, PURPOSE_VERIFY_EMAIL))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending verification email to %s: %s", email, e)
        return user_id

    def login_with_email(self, email: str, password: str, expected_role: str = None) -> dict:
        """Returns {"access_token", "user_id", "role", "user_data"}."""
        account = self._authenticate(email, password)

        if not account["email_verified"]:
            raise PermissionDeniedError(
                "Email not verified. Please check your inbox and verify your email before logging in."
            )

        profile = self.profiles.get_raw(account["user_id"])
        if not profile:
            raise NotFoundError("User data not found.")
        if profile.get("email_verified") is False:
            raise PermissionDeniedError("Email verification pending. Please verify your email.")
        if expected_role and profile.get("role") != expected_role:
            raise PermissionDeniedError(f"User role mismatch. Expected role: {expected_role}.")

        token = create_access_token(
            data={"sub": account["user_id"], "role": account["role"], "ver": account["token_version"]}
        )
        logger.info("User %s logged in", account["user_id"])
        return {
            "access_token": token,
            "user_id": account["user_id"],
            "role": account["role"],
            "user_data": self.profiles.get_profile(account["user_id"]),
        }

    def resend_verification_email(self, email: str, password: str) -> None:
        account = self._authenticate(email, password)
        if account["email_verified"]:
            raise InvalidRequestError("Email already verified")
        send_verification_email(account["email"], create_action_token(account["user_id"], PURPOSE_VERIFY_EMAIL))

    def verify_email(self, token: str) -> str:
        """Apply a verification token; marks account and profile verified."""
        payload = decode_action_token(token, PURPOSE_VERIFY_EMAIL)
        if not payload:
            raise InvalidRequestError("Invalid or expired verification link")
        user_id = payload["sub"]

        with get_db_session() as db:
            result = db.execute(
                text("UPDATE users SET email_verified = :verified WHERE user_id = :id"),
                {"verified": True, "id": user_id}
            )
            if result.rowcount == 0:
                raise InvalidRequestError("Invalid or expired verification link")

        revoke_token(payload)
        self.profiles.set_email_verified(user_id)
        logger.info("Email verified for %s", user_id)
        return user_id

    def reset_password(self, email: str) -> None:
        """Send a reset link if the email is registered."""
        account = self._get_account(email)
        if not account:
            logger.info("Password reset requested for unknown email")
            return
        send_password_reset_email(account["email"], create_action_token(account["user_id"], PURPOSE_RESET_PASSWORD))

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Set the new password, spend the link and sign out every existing session."""
        payload = decode_action_token(token, PURPOSE_RESET_PASSWORD)
        if not payload:
            raise InvalidRequestError("Invalid or expired reset link")
        user_id = payload["sub"]

        with get_db_session() as db:
            result = db.execute(
                text("""
                    UPDATE users
                    SET password_hash = :hash, token_version = token_version + 1
                    WHERE user_id = :id
                """),
                {"hash": hash_password(new_password), "id": user_id}
            )
            if result.rowcount == 0:
                raise InvalidRequestError("Invalid or expired reset link")

        revoke_token(payload)
        logger.info("Password reset for %s", user_id)

    def logout(self, token_payload: dict) -> None:
        revoke_token(token_payload)
        logger.info("User %s logged out", token_payload.get("sub"))

    def check_email_verified(self, user_id: str) -> bool:
        account = self.get_account(user_id)
        return bool(account and account["email_verified"])


def get_auth_service() -> AuthService:
    return AuthService()
