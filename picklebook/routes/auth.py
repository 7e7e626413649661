"""Authentication routes: register, login, current user, email verification, password reset, social sign-in."""

import logging

from fastapi import APIRouter, Depends, status

from picklebook.core.dependencies import get_current_user, get_mock_api
from picklebook.schemas import (
    AuthResponse,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SocialAuthRequest,
    UserOut,
    VerifyEmailRequest,
)
from picklebook.services.mock_api import MockApi

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, mock_api: MockApi = Depends(get_mock_api)):
    return await mock_api.register(body.email, body.password, body.name)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, mock_api: MockApi = Depends(get_mock_api)):
    return await mock_api.login(body.email, body.password)


@router.get("/me", response_model=UserOut)
async def me(user: UserOut = Depends(get_current_user)):
    return user


@router.post("/social", response_model=AuthResponse)
async def social_auth(body: SocialAuthRequest, mock_api: MockApi = Depends(get_mock_api)):
    return await mock_api.social_auth(body.token, body.provider, {"email": body.email, "name": body.name})


# ---------------------------------------------------------------------------
# Email verification
# ---------------------------------------------------------------------------


@router.post("/verify-email", response_model=UserOut)
async def verify_email(body: VerifyEmailRequest, mock_api: MockApi = Depends(get_mock_api)):
    return await mock_api.verify_email(body.email, body.token)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(body: EmailRequest, mock_api: MockApi = Depends(get_mock_api)):
    await mock_api.resend_verification_email(body.email)
    return MessageResponse(message="Verification email sent")


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: EmailRequest, mock_api: MockApi = Depends(get_mock_api)):
    """Request a password reset email. Always returns 200 to prevent user enumeration."""
    await mock_api.request_password_reset(body.email)
    return MessageResponse(message="If an account exists with that email, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, mock_api: MockApi = Depends(get_mock_api)):
    await mock_api.reset_password(body.email, body.token, body.new_password)
    logger.info("Password reset for %s", body.email)
    return MessageResponse(message="Password reset successfully")
