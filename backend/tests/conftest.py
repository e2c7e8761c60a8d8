"""
Shared fixtures.

The environment is configured before anything from crashify is imported:
settings, the engine and the storage root are all created at import time.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="crashify-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["SUPABASE_DB_URL"] = ""
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["RESEND_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
from fastapi.testclient import TestClient

from crashify.main import app
from crashify.api.v1.endpoints import contact as contact_endpoint
from crashify.console.api_client import AdminApiClient
from crashify.core.report_dispatch_service import report_dispatch_service
from crashify.core.security import get_password_hash
from crashify.db.base import Base, SessionLocal, engine
from crashify.models import Assessment, User

from helpers import TEST_PASSWORD, FakeMailer, headers_for, token_for


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(role: str = "admin", email: str = None, is_active: bool = True, name: str = None) -> User:
        user = User(
            email=email or f"{role}@crashify.com.au",
            name=name or f"Test {role.title()}",
            hashed_password=get_password_hash(TEST_PASSWORD),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user("admin")


@pytest.fixture
def manager_user(make_user):
    return make_user("manager")


@pytest.fixture
def reviewer_user(make_user):
    return make_user("reviewer")


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def make_assessment(db):
    def _make(**overrides) -> Assessment:
        values = {
            "company_name": "NRMA Insurance",
            "your_name": "Jane Smith",
            "your_email": "jane.smith@nrma.com.au",
            "your_phone": "0412345678",
            "assessment_type": "Desktop Assessment",
            "claim_reference": "CLM-1001",
            "make": "Toyota",
            "model": "Corolla",
            "year": 2019,
            "registration": "ABC123",
            "owner_info": {"firstName": "Tom", "lastName": "Owner", "email": "tom@example.com"},
            "status": "pending",
        }
        values.update(overrides)
        assessment = Assessment(**values)
        db.add(assessment)
        db.commit()
        db.refresh(assessment)
        return assessment
    return _make


@pytest.fixture
def fake_mailer(monkeypatch):
    mailer = FakeMailer()
    monkeypatch.setattr(report_dispatch_service, "mailer", mailer)
    monkeypatch.setattr(contact_endpoint, "email_service", mailer)
    return mailer


@pytest.fixture
async def console_factory():
    """Build AdminApiClients wired straight into the app."""
    clients = []

    def _make(user: User = None) -> AdminApiClient:
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        api = AdminApiClient(base_url="http://test", token=token_for(user) if user else None, client=http)
        clients.append(api)
        return api

    yield _make

    for api in clients:
        await api.aclose()


@pytest.fixture
def admin_api(console_factory, admin_user):
    return console_factory(admin_user)
