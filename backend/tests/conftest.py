"""Shared fixtures: in-memory database, test client, users and communities."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Configuration is read at import time, so set it before importing the app.
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="seedy-uploads-"))

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, enable_sqlite_foreign_keys, get_db
from main import app
from models.community import MEMBERSHIP_STATUS_ACTIVE, ROLE_FOUNDER, Community, UserCommunity
from models.user import User
from repositories import RoleRepository
from services.auth import hash_password


TEST_PASSWORD = "TestPass123"

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def create_jwt_token(user_id: int, expires_delta: timedelta = timedelta(hours=1)) -> str:
    """Sign a token the way the app does, with the test secret."""
    payload = {
        "sub": str(user_id),
        "id": user_id,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, "test-secret-key", algorithm="HS256")


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token(user.id)}"}


def make_user(
    db: Session,
    username: str,
    email: str | None = None,
    password: str = TEST_PASSWORD,
    is_admin: bool = False,
) -> User:
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        hashed_password=hash_password(password),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_community(db: Session, founder: User, name: str = "Gardeners") -> Community:
    community = Community(name=name, description=f"{name} community", picture="/uploads/default/community/1.png")
    db.add(community)
    db.flush()
    add_member(db, founder, community, ROLE_FOUNDER)
    db.refresh(community)
    return community


def add_member(db: Session, user: User, community: Community, role_name: str) -> UserCommunity:
    role = RoleRepository(db).by_name(role_name)
    membership = UserCommunity(
        user_id=user.id,
        community_id=community.id,
        role_id=role.id,
        status=MEMBERSHIP_STATUS_ACTIVE,
    )
    db.add(membership)
    db.commit()
    return membership


@pytest.fixture
def db_session():
    """Fresh schema with the role catalog for every test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestingSessionLocal()
    RoleRepository(db).ensure_defaults()
    db.commit()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> User:
    return make_user(db_session, "testuser", "test@example.com")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return make_user(db_session, "otheruser", "other@example.com")


@pytest.fixture
def valid_jwt_token(test_user: User) -> str:
    return create_jwt_token(test_user.id)


@pytest.fixture
def auth_headers(valid_jwt_token: str) -> dict:
    return {"Authorization": f"Bearer {valid_jwt_token}"}


@pytest.fixture
def community(db_session: Session, test_user: User) -> Community:
    """A community founded by ``test_user``."""
    return make_community(db_session, test_user)
