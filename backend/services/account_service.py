"""Registration, login, availability checks and profile edits."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.user import User
from repositories import UserRepository
from services.auth import Principal, create_access_token, hash_password, verify_password
from services.exceptions import ConflictError, NotFoundError, PermissionDeniedError, UnauthorizedError


logger = logging.getLogger(__name__)


class AccountService:
    """Service for account lifecycle operations."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def register(
        self,
        username: str,
        email: str,
        password: str,
        picture: Optional[str] = None,
    ) -> User:
        """Create a user after checking username and email independently."""
        if self.users.username_taken(username):
            raise ConflictError("Username already exists")
        if self.users.email_taken(email):
            raise ConflictError("Email already exists")

        user = User(
            username=username,
            email=email,
            picture=picture,
            hashed_password=hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same identity.
            self.db.rollback()
            raise ConflictError("Username or email already exists")

        self.db.refresh(user)
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def login(self, username: str, password: str) -> tuple[str, User]:
        """Return a signed token and the user, or fail without saying which part was wrong."""
        user = self.users.by_username(username)
        if not user or not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid credentials")
        return create_access_token(user.id), user

    def username_available(self, username: str, ignore_user_id: Optional[int] = None) -> bool:
        return not self.users.username_taken(username, exclude_id=ignore_user_id)

    def email_available(self, email: str, ignore_user_id: Optional[int] = None) -> bool:
        return not self.users.email_taken(email, exclude_id=ignore_user_id)

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def edit_user(
        self,
        principal: Principal,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
        picture: Optional[str] = None,
    ) -> User:
        user = self.get_user(user_id)
        if principal.user_id != user.id:
            raise PermissionDeniedError("You can only edit your own profile")

        changes = {}
        if username and username != user.username:
            if self.users.username_taken(username, exclude_id=user.id):
                raise ConflictError("Username already exists")
            changes["username"] = username
        if email and email != user.email:
            if self.users.email_taken(email, exclude_id=user.id):
                raise ConflictError("Email already exists")
            changes["email"] = email
        if picture:
            changes["picture"] = picture

        if changes:
            try:
                self.users.update(user, **changes)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise ConflictError("Username or email already exists")
            self.db.refresh(user)
        return user
