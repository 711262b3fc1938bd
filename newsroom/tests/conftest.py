"""
Test configuration for Newsroom unit tests.

Ensures the project root is on sys.path so the newsroom package can be
imported without relying on external environment variables, and provides an
application wired to in-memory collaborators.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from newsroom.config import Settings  # noqa: E402
from newsroom.server import create_app  # noqa: E402
from newsroom.services.token_verifier import Identity  # noqa: E402

from .fakes import ADMIN_TOKEN, READER_TOKEN, FakeDatabase, FakeVerifier  # noqa: E402


@pytest.fixture
def static_dir(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<html>newsroom</html>")
    (public / "app.js").write_text("console.log('newsroom');")
    return public


@pytest.fixture
def settings(tmp_path, static_dir):
    return Settings(
        admins="admin-sub, second-admin",
        google_client_id="test-client.apps.googleusercontent.com",
        static_dir=str(static_dir),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def verifier():
    return FakeVerifier(
        {
            ADMIN_TOKEN: Identity(subject="admin-sub", email="admin@example.com"),
            READER_TOKEN: Identity(subject="reader-sub"),
        }
    )


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def app(settings, verifier, fake_db):
    application = create_app(settings, token_verifier=verifier)
    application.state.db = fake_db
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
