"""Authentication pass-through endpoints over Supabase Auth."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth_middleware import AuthContext, get_auth_context, require_anonymous
from app.core.logging import clear_log_context, get_logger, log_event
from app.core.schemas_auth import (
    AuthTokens,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
)
from app.db.supabase_client import get_auth_client, get_supabase

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _tokens(response, message: str = "") -> AuthTokens:
    session = getattr(response, "session", None)
    user = getattr(response, "user", None)
    return AuthTokens(
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
        user_id=str(user.id) if user else None,
        email=user.email if user else None,
        message=message,
    )


@router.post("/sign-up", response_model=AuthTokens)
async def sign_up(request: SignUpRequest, _: AuthContext = Depends(require_anonymous)) -> AuthTokens:
    """Create an account. A session is returned when email confirmation is off."""
    log_event(logger, logging.INFO, "auth_signup_attempt")
    try:
        response = get_auth_client().auth.sign_up({"email": request.email, "password": request.password})
    except Exception as e:
        log_event(logger, logging.WARNING, "auth_signup_error", message=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    log_event(logger, logging.INFO, "auth_signup_success")
    return _tokens(response, "Check your email to confirm your account")


@router.post("/sign-in", response_model=AuthTokens)
async def sign_in(request: SignInRequest, _: AuthContext = Depends(require_anonymous)) -> AuthTokens:
    log_event(logger, logging.INFO, "auth_login_attempt")
    try:
        response = get_auth_client().auth.sign_in_with_password(
            {"email": request.email, "password": request.password}
        )
    except Exception as e:
        log_event(logger, logging.WARNING, "auth_login_error", message=str(e))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    log_event(logger, logging.INFO, "auth_login_success")
    return _tokens(response)


@router.post("/forgot-password", response_model=AuthTokens)
async def forgot_password(
    request: ForgotPasswordRequest, _: AuthContext = Depends(require_anonymous)
) -> AuthTokens:
    """Send a password reset email."""
    options = {"redirect_to": request.redirect_url} if request.redirect_url else {}
    try:
        get_auth_client().auth.reset_password_for_email(request.email, options)
    except Exception as e:
        log_event(logger, logging.WARNING, "auth_reset_request_error", message=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    log_event(logger, logging.INFO, "auth_reset_requested")
    return AuthTokens(message="If an account exists, a reset link has been sent")


@router.post("/reset-password", response_model=AuthTokens)
async def reset_password(
    request: ResetPasswordRequest, _: AuthContext = Depends(require_anonymous)
) -> AuthTokens:
    """Set a new password using the recovery token from the reset email."""
    client = get_supabase()
    try:
        user = client.auth.get_user(request.access_token)
        if not user or not user.user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired reset link")
        client.auth.admin.update_user_by_id(str(user.user.id), {"password": request.new_password})
    except HTTPException:
        raise
    except Exception as e:
        log_event(logger, logging.WARNING, "auth_reset_error", message=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    log_event(logger, logging.INFO, "auth_reset_success")
    return AuthTokens(message="Password updated")


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(auth: AuthContext = Depends(get_auth_context)) -> None:
    """Revoke the caller's session if there is one."""
    if auth.token:
        try:
            get_supabase().auth.admin.sign_out(auth.token)
        except Exception as e:
            log_event(logger, logging.WARNING, "auth_signout_error", message=str(e))
    log_event(logger, logging.INFO, "auth_session_ended")
    clear_log_context()
