"""Pytest configuration and fixtures."""

import os
import shutil
import tempfile

# Settings are read once at import time, so the environment must be in place first
UPLOAD_DIR = tempfile.mkdtemp(prefix="imageshare-uploads-")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = UPLOAD_DIR
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from imageshare.config import get_settings  # noqa: E402
from imageshare.database import Base, engine, get_db  # noqa: E402
from imageshare.main import app  # noqa: E402
from imageshare.services.auth import decode_access_token  # noqa: E402

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# PNG signature plus filler; only the declared content type is checked
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    shutil.rmtree(UPLOAD_DIR, ignore_errors=True)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _register(client, settings, email: str, name: str) -> AuthHeaders:
    response = client.post("/user", json={"name": name, "email": email, "password": "testpass123"})
    assert response.status_code == 201
    data = response.json()
    token = data["token"]
    identity = decode_access_token(settings, token)
    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=identity.id, email=data["email"])


@pytest.fixture
def auth_headers(client, settings):
    """Create a user and return auth headers with user info."""
    return _register(client, settings, "test@example.com", "Test User")


@pytest.fixture
def other_auth_headers(client, settings):
    """A second registered user."""
    return _register(client, settings, "other@example.com", "Other User")


def _upload(
    client,
    headers,
    filename: str = "photo.png",
    content: bytes = PNG_BYTES,
    content_type: str = "image/png",
    **form,
):
    return client.post(
        "/api/upload",
        headers=headers,
        files={"image": (filename, content, content_type)},
        data=form,
    )


@pytest.fixture
def upload_image(client):
    """Callable that uploads an image through the API and returns the response."""

    def upload(headers, **kwargs):
        return _upload(client, headers, **kwargs)

    return upload


@pytest.fixture
def uploaded_image(client, auth_headers):
    """An image uploaded by the auth_headers user."""
    response = _upload(client, auth_headers, description="A pixel", tags="tiny,png")
    assert response.status_code == 201
    return response.json()["image"]
