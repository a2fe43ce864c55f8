"""Pydantic schemas for account endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


MIN_PASSWORD_LENGTH = 8


def _validate_new_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return value


class MessageResponse(BaseModel):
    message: str


class UserPublic(BaseModel):
    """Profile fields safe to show to any authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    picture: Optional[str] = None


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str
    picture: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_new_password(v)


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserPublic


class CheckUsernameRequest(BaseModel):
    username: str
    ignore_user_id: Optional[int] = None


class CheckEmailRequest(BaseModel):
    email: str
    ignore_user_id: Optional[int] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _validate_new_password(v)


class ChangePasswordRequest(BaseModel):
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _validate_new_password(v)


class UserEditRequest(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    picture: Optional[str] = None
