import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{ROOT / 'data' / 'test.db'}")

from fastapi.testclient import TestClient  # noqa: E402

from portal.db.session import Base, get_db  # noqa: E402
from portal.main import app  # noqa: E402

# Ensure models are registered so metadata tables are created
from portal.models import session as session_model  # noqa: E402,F401
from portal.models import user as user_model  # noqa: E402,F401


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_engine):
    TestingSessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def sign_in(client):
    """Run the credentials sign-in flow and return the final (unfollowed) response."""

    def _sign_in(email: str, password: str, callback_url: str = "/dashboard"):
        csrf = client.get("/api/auth/csrf").json()["csrfToken"]
        return client.post(
            "/api/auth/callback/credentials",
            data={
                "csrfToken": csrf,
                "email": email,
                "password": password,
                "callbackUrl": callback_url,
            },
            follow_redirects=False,
        )

    return _sign_in
