"""
Shared fixtures.

Environment variables are set before `life_lessons` is imported so the module-level
`settings` picks them up.
"""

import os

os.environ.setdefault("IDENTITY_TOKEN_SECRET", "test-identity-secret")
os.environ.setdefault("IDENTITY_TOKEN_ALGORITHM", "HS256")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")
os.environ.setdefault("CLIENT_URL", "http://localhost:5173")
os.environ.setdefault("METRICS_ENABLED", "false")

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from httpx import ASGITransport, AsyncClient
from jose import jwt
import pytest
import pytest_asyncio

from life_lessons.config import settings
from life_lessons.main import app
from life_lessons.managers.identity_manager import IdentityManager
from life_lessons.routes.dependencies import get_checkout_service, get_db_manager, get_identity_manager
from life_lessons.services.checkout_service import CheckoutService
from life_lessons.services.contributor_service import ContributorService
from life_lessons.services.lesson_service import LessonService
from tests.fakes import FakeDatabaseManager


@pytest.fixture
def test_settings():
    return settings


@pytest.fixture
def fake_db():
    return FakeDatabaseManager()


@pytest.fixture
def contributor_service(fake_db, test_settings):
    return ContributorService(fake_db, test_settings)


@pytest.fixture
def lesson_service(fake_db, test_settings, contributor_service):
    return LessonService(fake_db, test_settings, contributor_service)


@pytest.fixture
def razorpay_client():
    client = MagicMock()
    client.payment_link.create.return_value = {
        "id": "plink_test123",
        "short_url": "https://rzp.io/i/test123",
        "status": "created",
    }
    return client


@pytest.fixture
def checkout_service(test_settings, razorpay_client):
    return CheckoutService(test_settings, client=razorpay_client)


@pytest.fixture
def make_token(test_settings):
    """Factory for identity tokens signed with the test secret."""

    def _make_token(email="member@example.com", expires_in=timedelta(hours=1), secret=None, **claims):
        payload = {"sub": f"uid-{email}", "exp": datetime.now(timezone.utc) + expires_in, **claims}
        if email is not None:
            payload["email"] = email
        key = secret or test_settings.IDENTITY_TOKEN_SECRET.get_secret_value()
        return jwt.encode(payload, key, algorithm=test_settings.IDENTITY_TOKEN_ALGORITHM)

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(email="member@example.com"):
        return {"Authorization": f"Bearer {make_token(email)}"}

    return _auth_headers


@pytest_asyncio.fixture
async def client(fake_db, test_settings, checkout_service):
    """HTTP client against the app with the database and payment provider replaced."""
    await fake_db.create_indexes()
    app.dependency_overrides[get_db_manager] = lambda: fake_db
    app.dependency_overrides[get_identity_manager] = lambda: IdentityManager(test_settings)
    app.dependency_overrides[get_checkout_service] = lambda: checkout_service

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client

    app.dependency_overrides.clear()
