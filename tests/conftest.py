"""
Pytest configuration and shared fixtures for AI Tools Hub tests.
"""

from pathlib import Path
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient


# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api import create_app  # noqa: E402
from src.repository import (  # noqa: E402
    AdminRepo,
    BlogPostRepo,
    ContactMessageRepo,
    NotificationRepo,
    UserRepo,
)
from src.store import DocumentStore, ObjectStorage  # noqa: E402

ADMIN_EMAIL = "root@aitoolshub.com"
ADMIN_PASSWORD = "correct-horse"


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    """Empty document store in a temp directory."""
    return DocumentStore(tmp_path / "hub.db")


@pytest.fixture
def storage(tmp_path: Path) -> ObjectStorage:
    return ObjectStorage(tmp_path / "storage", "/files")


@pytest.fixture
def users(store: DocumentStore) -> UserRepo:
    return UserRepo(store)


@pytest.fixture
def posts(store: DocumentStore) -> BlogPostRepo:
    return BlogPostRepo(store)


@pytest.fixture
def notifications(store: DocumentStore) -> NotificationRepo:
    return NotificationRepo(store)


@pytest.fixture
def messages(store: DocumentStore, notifications: NotificationRepo) -> ContactMessageRepo:
    return ContactMessageRepo(store, notifications)


@pytest.fixture
def admins(store: DocumentStore) -> AdminRepo:
    return AdminRepo(store)


@pytest.fixture
def contact_form() -> Dict[str, Any]:
    """A valid public contact form submission."""
    return {
        "name": "Jo",
        "email": "jo@x.com",
        "company": "",
        "inquiryType": "general",
        "subject": "Hi",
        "message": "Hello",
    }


@pytest.fixture
def client(tmp_path: Path):
    """TestClient with the lifespan running against a temp store."""
    app = create_app(db_path=tmp_path / "api.db", storage_path=tmp_path / "api-storage")
    with TestClient(app) as c:
        yield c


@pytest.fixture
def app_state(client: TestClient):
    return client.app.state.state


@pytest.fixture
def super_admin(app_state) -> Dict[str, Any]:
    return app_state.admins.create_admin(ADMIN_EMAIL, ADMIN_PASSWORD, role="super_admin", display_name="Root")


@pytest.fixture
def admin_headers(client: TestClient, super_admin: Dict[str, Any]) -> Dict[str, str]:
    """Authorization header for a signed-in super admin."""
    resp = client.post("/v1/admin/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def login_as(client: TestClient, app_state):
    """Create an admin with the given role/permissions and return its auth header."""

    def _login(email: str, *, role: str = "admin", permissions=None) -> Dict[str, str]:
        app_state.admins.create_admin(email, "password1", role=role, permissions=permissions)
        resp = client.post("/v1/admin/auth/login", json={"email": email, "password": "password1"})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login
