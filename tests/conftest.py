"""Pytest fixtures for testing"""

import pytest
from typing import Callable, Dict, Generator
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from kasa_gateway.api.main import create_app
from kasa_gateway.config import settings
from kasa_gateway.domain.models import Actor
from kasa_gateway.infrastructure.database.models import Base
from kasa_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_token(uid: str, role: str, email: str = "") -> str:
    """Sign a bearer token the way the identity provider does"""
    claims = {"uid": uid, "email": email or f"{uid}@kasa.test", "role": role}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def auth() -> Callable[..., Dict[str, str]]:
    """Build Authorization headers for a user id and role"""

    def _headers(uid: str = "desk-1", role: str = "desk") -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(uid, role)}"}

    return _headers


@pytest.fixture
def desk_actor() -> Actor:
    return Actor(uid="desk-1", email="desk-1@kasa.test", role="desk")


@pytest.fixture
def reviewer_actor() -> Actor:
    return Actor(uid="resp-1", email="resp-1@kasa.test", role="responsible")


@pytest.fixture
def admin_actor() -> Actor:
    return Actor(uid="admin-1", email="admin-1@kasa.test", role="admin")


@pytest.fixture
def desk_payload() -> dict:
    """Desk settlement used across tests: sales 1150, credit cards 3530"""
    return {
        "date": "2024-03-01",
        "products": {"dolum": 150, "tamKart": 20},
        "categoryCreditCards": {"dolum": 3530, "kart": 0},
        "payments": {"gunbasiNakit": 720, "bankayaGonderilen": 0, "ertesiGuneBirakilan": 0},
        "banknotes": {"dolum": {"b200": 2, "b50": 1}, "kart": {"b100": 1}},
    }
