"""Account endpoints: registration, login, availability checks and password reset."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from config import RATE_LIMIT_ENABLED
from database import get_db
from schemas.auth import (
    CheckEmailRequest,
    CheckUsernameRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserPublic,
)
from services.account_service import AccountService
from services.password_service import PasswordService


logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
router = APIRouter(tags=["auth"])


@router.post("/register", response_model=MessageResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account. No token is issued; the client logs in afterwards."""
    service = AccountService(db)
    service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        picture=payload.picture,
    )
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange username and password for a bearer token.

    Rate limit: 10 requests per minute per IP.
    """
    service = AccountService(db)
    token, user = service.login(payload.username, payload.password)
    return LoginResponse(token=token, user=UserPublic.model_validate(user))


@router.post("/check-username", response_model=MessageResponse)
def check_username(payload: CheckUsernameRequest, db: Session = Depends(get_db)):
    service = AccountService(db)
    if not service.username_available(payload.username, payload.ignore_user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already exists")
    return MessageResponse(message="Username available")


@router.post("/check-email", response_model=MessageResponse)
def check_email(payload: CheckEmailRequest, db: Session = Depends(get_db)):
    service = AccountService(db)
    if not service.email_available(payload.email, payload.ignore_user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")
    return MessageResponse(message="Email available")


@router.api_route("/forgot-password", methods=["POST", "PUT"], response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
):
    """
    Mail a one-hour password reset token to the account owning ``email``.

    Rate limit: 3 requests per minute per IP.
    """
    service = PasswordService(db)
    service.request_password_reset(payload.email)
    return MessageResponse(message="Email sent with instructions to reset password")


@router.put("/reset-password", response_model=MessageResponse)
@limiter.limit("10/minute")
def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
):
    service = PasswordService(db)
    service.reset_password(payload.token, payload.new_password)
    return MessageResponse(message="Password successfully updated")
