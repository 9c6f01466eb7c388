import os
import sys
import pathlib

import pytest

# Configure the app for tests before anything imports config/database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("TZ", "UTC")

_BACKEND_ROOT = pathlib.Path(__file__).resolve().parent.parent / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_tables():
    """Every test starts from empty tables on the shared in-memory database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register a user and return Authorization headers for them."""

    def _register(email="demo@spendly.com", password="password", name="Demo User"):
        r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    return register()
