"""Password reset and change flows."""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from config import PASSWORD_RESET_EXPIRE_MINUTES
from database import utcnow
from repositories import UserRepository
from services.auth import Principal, hash_password
from services.email_service import EmailService
from services.exceptions import BadRequestError, NotFoundError, ServiceUnavailableError


logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 20


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


class PasswordService:
    """Service for password management operations."""

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.users = UserRepository(db)
        self.email_service = email_service or EmailService()

    def request_password_reset(self, email: str) -> str:
        """
        Issue a reset token for the user owning ``email`` and mail it to them.

        Any earlier token for the same user is overwritten. Returns the raw
        token. Raises NotFoundError for unknown emails and
        ServiceUnavailableError when the mail could not be sent.
        """
        user = self.users.by_email(email)
        if not user:
            raise NotFoundError("User not found")

        raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
        self.users.update(
            user,
            reset_password_token_hash=hash_reset_token(raw_token),
            reset_password_expires=utcnow() + timedelta(minutes=PASSWORD_RESET_EXPIRE_MINUTES),
        )
        self.db.commit()

        sent = self.email_service.send_password_reset(
            to_email=user.email,
            username=user.username,
            token=raw_token,
        )
        if not sent:
            raise ServiceUnavailableError("Error sending reset email.")
        return raw_token

    def reset_password(self, raw_token: str, new_password: str) -> None:
        """Consume an unexpired reset token and set the new password."""
        consumed = self.users.consume_reset_token(
            token_hash=hash_reset_token(raw_token),
            new_hashed_password=hash_password(new_password),
            now=utcnow(),
        )
        if not consumed:
            self.db.rollback()
            raise BadRequestError("Expired token")
        self.db.commit()

    def change_password(self, principal: Principal, new_password: str) -> None:
        user = self.users.get(principal.user_id)
        if not user:
            raise NotFoundError("User not found")
        self.users.update(user, hashed_password=hash_password(new_password))
        self.db.commit()
        logger.info("Password changed for user %s", user.id)
