"""
Authentication Routes

POST /auth/register                - Register (unverified, not logged in)
POST /auth/login                   - Login and get JWT token
POST /auth/logout                  - Revoke the current token
GET  /auth/me                      - Current account info
POST /auth/resend-verification     - Send the verification email again
GET  /auth/verify-email            - Verify email (link target)
POST /auth/verify-email            - Verify email (token in body)
GET  /auth/email-verified          - Is the current account verified?
POST /auth/password-reset          - Send a password reset email
POST /auth/password-reset/confirm  - Set a new password with a reset token
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from jobboard.core.auth import get_current_user
from jobboard.services.auth_service import get_auth_service
from jobboard.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse,
    ResendVerificationRequest, VerifyEmailRequest, PasswordResetRequest, PasswordResetConfirm
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account.

    A verification email is sent; login is refused until the email is verified.
    """
    additional = {"full_name": request.full_name}
    if request.company_name:
        additional["company_name"] = request.company_name

    get_auth_service().register_with_email(
        request.email, request.password, request.role.value, additional
    )
    return MessageResponse(
        message="Verification email sent. Please check your inbox and verify your email before logging in."
    )


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    expected_role = request.expected_role.value if request.expected_role else None
    result = get_auth_service().login_with_email(request.email, request.password, expected_role)
    return TokenResponse(**result)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: dict = Depends(get_current_user)):
    """Revoke the token used for this request."""
    get_auth_service().logout(user["token"])
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    account = get_auth_service().get_account(user["user_id"])
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return UserResponse(**account)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(request: ResendVerificationRequest):
    get_auth_service().resend_verification_email(request.email, request.password)
    return MessageResponse(message="Verification email sent.")


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email_link(token: str = Query(..., min_length=1)):
    """Target of the link in the verification email."""
    get_auth_service().verify_email(token)
    return MessageResponse(message="Email verified successfully.")


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(request: VerifyEmailRequest):
    get_auth_service().verify_email(request.token)
    return MessageResponse(message="Email verified successfully.")


@router.get("/email-verified")
async def email_verified(user: dict = Depends(get_current_user)):
    return {"email_verified": get_auth_service().check_email_verified(user["user_id"])}


@router.post("/password-reset", response_model=MessageResponse)
async def password_reset(request: PasswordResetRequest):
    """Always reports success so registered emails cannot be probed."""
    get_auth_service().reset_password(request.email)
    return MessageResponse(message="Password reset email sent.")


@router.post("/password-reset/confirm", response_model=MessageResponse)
async def password_reset_confirm(request: PasswordResetConfirm):
    get_auth_service().confirm_password_reset(request.token, request.new_password)
    return MessageResponse(message="Password updated. Please login.")
