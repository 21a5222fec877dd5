# tests/conftest.py
import asyncio
import os
import sys
import tempfile

# Settings are read at import time, so the test environment must be in place
# before anything from studysync is imported.
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-studysync-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="studysync-uploads-")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="studysync-logs-")
os.environ["RATE_LIMITER_STORAGE_URI"] = "memory://"

import pytest
from fastapi.testclient import TestClient

from studysync.main import app
from studysync.config.config import settings
from studysync.api.dependencies import get_db_client, get_file_storage
from studysync.api.utilities.limiter import limiter
from studysync.tools.file_storage import FileStorage
from tests.fakes import InMemoryDBClient
from tests.helpers import signup

# Windows needs the selector loop for asyncio under pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def fake_db() -> InMemoryDBClient:
    return InMemoryDBClient()


@pytest.fixture
def storage() -> FileStorage:
    """Writes into the directory the app serves under /uploads."""
    return FileStorage(upload_dir=settings.UPLOAD_DIR, public_base_url="")


@pytest.fixture
def api_app(fake_db, storage):
    """The FastAPI app wired to the in-memory database and a fresh rate limiter."""
    app.dependency_overrides[get_db_client] = lambda: fake_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    limiter.reset()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client) -> dict:
    body = signup(client)
    return {"token": body["token"]}


@pytest.fixture
def admin_headers(client, fake_db) -> dict:
    body = signup(client, email="admin@example.com", full_name="Admin User")
    fake_db.make_admin("admin@example.com")
    return {"token": body["token"]}
