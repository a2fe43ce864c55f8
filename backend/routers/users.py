"""User profile endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth import ChangePasswordRequest, MessageResponse, UserEditRequest, UserPublic
from services.account_service import AccountService
from services.auth import Principal, get_current_principal
from services.password_service import PasswordService


router = APIRouter(prefix="/user", tags=["users"])


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return AccountService(db).get_user(user_id)


@router.put("/{user_id}/edit", response_model=UserPublic)
def edit_user(
    user_id: int,
    payload: UserEditRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Update the caller's own username, email or picture."""
    service = AccountService(db)
    return service.edit_user(
        principal,
        user_id,
        username=payload.username,
        email=payload.email,
        picture=payload.picture,
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    PasswordService(db).change_password(principal, payload.new_password)
    return MessageResponse(message="Password successfully updated")
