import os

# Keep the app's own engine off disk; tests use test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from langschool.database import get_session, make_engine  # noqa: E402
from langschool.errors import Unauthenticated  # noqa: E402
from langschool.main import app  # noqa: E402
from langschool.models.tutorial import Tutorial  # noqa: E402
from langschool.services.identity_service import Principal, get_principal_verifier  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. make_engine adds check_same_thread=False and SQLite foreign keys
# 3. Tables are dropped after every test so reviewer listings start empty
# 4. App dependencies overridden for the session AND the token verifier
test_engine = make_engine(TEST_DATABASE_URL, poolclass=StaticPool)

ALICE = Principal(email="alice@example.com", name="Alice Learner", uid="uid-alice")
BOB = Principal(email="bob@example.com", name=None, uid="uid-bob")
TUTOR = Principal(email="tutor@example.com", name="Maria Tutor", uid="uid-tutor")

TOKENS = {
    "alice-token": ALICE,
    "bob-token": BOB,
    "tutor-token": TUTOR,
}


class FakeVerifier:
    """Stands in for Firebase: known tokens map to principals, anything else is rejected."""

    def __init__(self, tokens=None):
        self.tokens = dict(tokens or TOKENS)
        self.calls = []

    def verify(self, credential: str) -> Principal:
        self.calls.append(credential)
        if credential not in self.tokens:
            raise Unauthenticated()
        return self.tokens[credential]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a freshly created schema"""
    import langschool.models  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="verifier")
def verifier_fixture():
    return FakeVerifier()


@pytest.fixture(name="client")
def client_fixture(session: Session, verifier: FakeVerifier):
    """Provide a test client with overridden database session and verifier

    Overrides MUST be set BEFORE TestClient() and stay in place for the
    entire duration, so the app never touches its own engine or Firebase.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_principal_verifier] = lambda: verifier

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_tutorial(session: Session):
    """Factory for tutorials owned by TUTOR unless told otherwise"""

    def _make(email: str = TUTOR.email, language: str = "Spanish", price: float = 25.0) -> Tutorial:
        tutorial = Tutorial(email=email, tutor_name="Maria Tutor", language=language, price=price)
        session.add(tutorial)
        session.commit()
        session.refresh(tutorial)
        return tutorial

    return _make
