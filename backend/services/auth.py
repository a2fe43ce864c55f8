"""Password hashing, token issuance and the bearer-token guard."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

import config
from services.exceptions import TokenError


logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.PASSWORD_HASH_ROUNDS,
)
bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_NOT_FOUND = "Token not found"
TOKEN_VERIFICATION_FAILED = "Token verification failed"


@dataclass(frozen=True)
class Principal:
    """Identity proven by a verified bearer token."""

    user_id: int


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return None


def principal_from_token(token: Optional[str]) -> Principal:
    """Verify ``token`` and build the principal.

    Raises TokenError: 401 when no token was supplied, 403 when it cannot be verified.
    """
    if not token:
        raise TokenError(TOKEN_NOT_FOUND, status_code=status.HTTP_401_UNAUTHORIZED)

    payload = decode_access_token(token)
    if not payload:
        raise TokenError(TOKEN_VERIFICATION_FAILED, status_code=status.HTTP_403_FORBIDDEN)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Rejected token without a usable subject claim")
        raise TokenError(TOKEN_VERIFICATION_FAILED, status_code=status.HTTP_403_FORBIDDEN)

    return Principal(user_id=user_id)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    token = credentials.credentials if credentials else None
    return principal_from_token(token)
