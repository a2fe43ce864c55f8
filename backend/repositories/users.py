from datetime import datetime
from typing import Optional

from models.user import User
from repositories.base import Repository


class UserRepository(Repository[User]):
    model = User

    def by_username(self, username: str) -> Optional[User]:
        return self.find_by(username=username)

    def by_email(self, email: str) -> Optional[User]:
        return self.find_by(email=email)

    def username_taken(self, username: str, exclude_id: Optional[int] = None) -> bool:
        return self.exists(exclude_id=exclude_id, username=username)

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return self.exists(exclude_id=exclude_id, email=email)

    def consume_reset_token(self, token_hash: str, new_hashed_password: str, now: datetime) -> bool:
        """Swap the password and clear the reset token in one UPDATE.

        The token match, the expiry check and the clearing happen in a single
        statement, so two concurrent resets cannot both consume one token.
        """
        updated = (
            self.query()
            .filter(
                User.reset_password_token_hash == token_hash,
                User.reset_password_expires > now,
            )
            .update(
                {
                    User.hashed_password: new_hashed_password,
                    User.reset_password_token_hash: None,
                    User.reset_password_expires: None,
                    User.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1
