"""
Pytest configuration and shared fixtures.

The app reads its settings at import time, so the temporary database,
storage directory and demo login are put into the environment first.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

_TMP = Path(tempfile.mkdtemp(prefix="stk_community_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_DIR"] = str(_TMP / "storage")
os.environ["STORAGE_PUBLIC_URL"] = "/storage"
os.environ["DEMO_ADMIN_USERNAME"] = "demo"
os.environ["DEMO_ADMIN_PASSWORD"] = "demo-password"
os.environ["SECRET_KEY"] = "test-secret"

from fastapi.testclient import TestClient  # noqa: E402

from stk_community import config  # noqa: E402
from stk_community.database import Base, SessionLocal  # noqa: E402
from stk_community.main import app  # noqa: E402
from stk_community.models.admin import Admin  # noqa: E402
from stk_community.utils.auth import create_session_token, get_password_hash  # noqa: E402
from stk_community.utils.storage import LocalBucket  # noqa: E402


def _clean_tables():
    with SessionLocal() as db:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()


@pytest.fixture
def db():
    _clean_tables()
    shutil.rmtree(config.STORAGE_DIR / config.STORAGE_BUCKET, ignore_errors=True)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    client.cookies.set(config.SESSION_COOKIE_NAME, create_session_token("demo"))
    return client


@pytest.fixture
def stored_admin(db):
    admin = Admin(username="editor", password=get_password_hash("s3cret-pass"))
    db.add(admin)
    db.commit()
    return admin


@pytest.fixture
def bucket(tmp_path):
    return LocalBucket(tmp_path, "documents", "/storage")


class ExplodingSession:
    """Stands in for a Session; any store access fails the test."""

    def __getattr__(self, name):
        raise AssertionError(f"store was accessed: Session.{name}")


@pytest.fixture
def no_store():
    return ExplodingSession()
