"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT access tokens (with revocable token ids)
- JWT action tokens for email verification and password reset
- FastAPI dependencies for protected routes
"""

import uuid
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import text

from jobboard.core.config import get_settings
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.db.postgres import get_db_session

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)

# Bearer token extractor
bearer_scheme = HTTPBearer()

PURPOSE_VERIFY_EMAIL = "verify_email"
PURPOSE_RESET_PASSWORD = "reset_password"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token. Every token gets a unique `jti` so it can be revoked."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def create_action_token(user_id: str, purpose: str) -> str:
    """Short-lived token for links sent by email."""
    return create_access_token(
        data={"sub": user_id, "purpose": purpose},
        expires_delta=timedelta(minutes=settings.action_token_expire_minutes)
    )


def decode_action_token(token: str, purpose: str) -> Optional[dict]:
    """
    Return the payload of a valid, unused action token for `purpose`, else None.

    Callers revoke the payload once the action is applied, so each emailed
    link works a single time.
    """
    payload = decode_token(token)
    if not payload or payload.get("purpose") != purpose:
        return None
    if not payload.get("sub") or not payload.get("jti") or is_token_revoked(payload["jti"]):
        return None
    return payload


def is_token_revoked(jti: str) -> bool:
    return get_collection(COLLECTIONS["revoked_tokens"]).find_one({"jti": jti}) is not None


def revoke_token(payload: dict) -> None:
    """Store the token id so later requests with it are refused."""
    get_collection(COLLECTIONS["revoked_tokens"]).update_one(
        {"jti": payload["jti"]},
        {"$set": {
            "jti": payload["jti"],
            "user_id": payload.get("sub"),
            "revoked_at": datetime.utcnow(),
        }},
        upsert=True
    )


def resolve_user(token: str) -> Optional[dict]:
    """
    Turn an access token into the current user dict, or None.

    Shared by the HTTP bearer dependency and the WebSocket endpoints.
    Action tokens are not accepted here, nor tokens issued before the
    account's last password change.
    """
    payload = decode_token(token)
    if not payload or payload.get("purpose"):
        return None

    user_id = payload.get("sub")
    jti = payload.get("jti")
    if not user_id or not jti or is_token_revoked(jti):
        return None

    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, email, role, is_active, token_version FROM users WHERE user_id = :id"),
            {"id": user_id}
        )
        user = result.fetchone()

    if not user:
        return None
    if payload.get("ver", 0) != (user[4] or 0):
        return None

    return {
        "user_id": user[0], "email": user[1], "role": user[2],
        "is_active": bool(user[3]), "token": payload
    }


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    user = resolve_user(credentials.credentials)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return user


async def get_current_job_seeker(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require job seeker role."""
    if user["role"] != "jobseeker":
        raise HTTPException(status_code=403, detail="Job seekers only")
    return user


async def get_current_employer(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require employer role."""
    if user["role"] != "employer":
        raise HTTPException(status_code=403, detail="Employers only")
    return user


optional_bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme)
) -> Optional[dict]:
    """Dependency - current user when a valid token is sent, else None."""
    if not credentials:
        return None
    return resolve_user(credentials.credentials)
