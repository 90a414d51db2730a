"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, client, fake integrations and per-role
authentication fixtures.

==============================================================================
"""

import json
import os

# Must be set before the application (and its cached settings) is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("BASE_URL", "https://flockfur.example.com")

import pytest
from typing import Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from flockfur.main import app
from flockfur.db.database import Base, enable_sqlite_foreign_keys, get_db
from flockfur.db.models import CleanerProfile, User, UserRole
from flockfur.core.security import get_security_manager
from flockfur.core.dependencies import get_integrations
from flockfur.integrations import Integrations
from flockfur.services.notification_service import NotificationService

from fakes import VALID_SIGNATURE, FakeEmailSender, FakePaymentGateway, FakeStorage


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

# In-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)

TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)

PASSWORD = "password123"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ============================================================================
# INTEGRATION FIXTURES
# ============================================================================

@pytest.fixture
def payments() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def mailer() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def notifier(mailer: FakeEmailSender) -> NotificationService:
    return NotificationService(mailer, "https://flockfur.example.com")


@pytest.fixture(scope="function")
def client(
    db: Session,
    payments: FakePaymentGateway,
    storage: FakeStorage,
    mailer: FakeEmailSender,
) -> Generator[TestClient, None, None]:
    """Create test client with database and integration overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    integrations = Integrations(payments=payments, storage=storage, email=mailer)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_integrations] = lambda: integrations

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# USER FIXTURES
# ============================================================================

def create_user(db: Session, email: str, name: str, role: UserRole) -> User:
    security = get_security_manager()
    user = User(
        email=email,
        name=name,
        password_hash=security.hash_password(PASSWORD),
        role=role,
        is_active=True
    )
    if role == UserRole.CLEANER:
        user.cleaner_profile = CleanerProfile(service_areas=[])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db: Session) -> User:
    return create_user(db, "admin@example.com", "Admin", UserRole.ADMIN)


@pytest.fixture
def client_user(db: Session) -> User:
    return create_user(db, "farmer@example.com", "Fiona Farmer", UserRole.CLIENT)


@pytest.fixture
def other_client(db: Session) -> User:
    return create_user(db, "neighbor@example.com", "Ned Neighbor", UserRole.CLIENT)


@pytest.fixture
def cleaner_user(db: Session) -> User:
    return create_user(db, "cleaner@example.com", "Carl Cleaner", UserRole.CLEANER)


@pytest.fixture
def other_cleaner(db: Session) -> User:
    return create_user(db, "helper@example.com", "Hana Helper", UserRole.CLEANER)


@pytest.fixture
def onboarded_cleaner(db: Session, cleaner_user: User) -> User:
    """Cleaner whose payout account finished onboarding."""
    cleaner_user.cleaner_profile.stripe_account_id = "acct_cleaner"
    cleaner_user.cleaner_profile.stripe_onboarded = True
    db.commit()
    return cleaner_user


# ============================================================================
# TOKEN / HEADER FIXTURES
# ============================================================================

def auth_headers(user: User) -> Dict[str, str]:
    token = get_security_manager().create_access_token({
        "sub": user.id,
        "email": user.email,
        "role": user.role.value
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def client_headers(client_user: User) -> Dict[str, str]:
    return auth_headers(client_user)


@pytest.fixture
def other_client_headers(other_client: User) -> Dict[str, str]:
    return auth_headers(other_client)


@pytest.fixture
def cleaner_headers(cleaner_user: User) -> Dict[str, str]:
    return auth_headers(cleaner_user)


@pytest.fixture
def other_cleaner_headers(other_cleaner: User) -> Dict[str, str]:
    return auth_headers(other_cleaner)


# ============================================================================
# WORKFLOW HELPERS
# ============================================================================

def job_payload(**overrides) -> dict:
    payload = {
        "title": "Clean out the chicken coop",
        "description": "Two coops, deep litter needs replacing and nest boxes scrubbed.",
        "animal_types": ["chicken"],
        "enclosure_type": "coop",
        "enclosure_size": "10x12 ft",
        "number_of_animals": 24,
        "address": "42 Orchard Lane",
        "zip_code": "35203",
        "suggested_price": "100.00",
    }
    payload.update(overrides)
    return payload


class Marketplace:
    """Drives a job through the workflow over the HTTP API."""

    def __init__(self, client: TestClient):
        self.client = client

    def create_job(self, headers: dict, **overrides) -> dict:
        response = self.client.post("/api/v1/jobs", json=job_payload(**overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["job"]

    def apply(self, job_id: str, headers: dict, proposed_price: Optional[str] = None) -> dict:
        body = {"message": "Happy to help, I have my own truck."}
        if proposed_price is not None:
            body["proposed_price"] = proposed_price
        response = self.client.post(f"/api/v1/jobs/{job_id}/applications", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["application"]

    def accept(self, application_id: str, headers: dict) -> dict:
        response = self.client.post(f"/api/v1/applications/{application_id}/accept", headers=headers)
        assert response.status_code == 200, response.text
        return response.json()

    def add_photo(self, job_id: str, headers: dict, photo_type: str = "after") -> dict:
        response = self.client.post(
            f"/api/v1/jobs/{job_id}/photos/upload-url",
            json={"type": photo_type, "filename": "coop.jpg", "content_type": "image/jpeg"},
            headers=headers
        )
        assert response.status_code == 200, response.text
        key = response.json()["key"]

        response = self.client.post(
            f"/api/v1/jobs/{job_id}/photos",
            json={"key": key, "type": photo_type},
            headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()["photo"]

    def post(self, job_id: str, action: str, headers: dict):
        return self.client.post(f"/api/v1/jobs/{job_id}/{action}", headers=headers)

    def assigned_job(self, client_headers: dict, cleaner_headers: dict, **overrides) -> dict:
        """A PENDING job assigned to the cleaner."""
        job = self.create_job(client_headers, **overrides)
        application = self.apply(job["id"], cleaner_headers)
        return self.accept(application["id"], client_headers)["job"]

    def completed_job(self, client_headers: dict, cleaner_headers: dict, **overrides) -> dict:
        job = self.assigned_job(client_headers, cleaner_headers, **overrides)
        assert self.post(job["id"], "start", cleaner_headers).status_code == 200
        self.add_photo(job["id"], cleaner_headers, "after")
        response = self.post(job["id"], "complete", cleaner_headers)
        assert response.status_code == 200, response.text
        return response.json()["job"]

    def confirmed_job(self, client_headers: dict, cleaner_headers: dict, **overrides) -> dict:
        job = self.completed_job(client_headers, cleaner_headers, **overrides)
        response = self.post(job["id"], "confirm", client_headers)
        assert response.status_code == 200, response.text
        return response.json()

    def paid_job(self, client_headers: dict, cleaner_headers: dict, **overrides) -> dict:
        """A confirmed job settled through the checkout webhook."""
        job = self.confirmed_job(client_headers, cleaner_headers, **overrides)["job"]
        event = {
            "id": f"evt_{job['id']}",
            "type": "checkout.session.completed",
            "data": {"object": {"id": "cs_paid", "metadata": {"jobId": job["id"]}}},
        }
        response = self.client.post(
            "/api/v1/payments/webhook",
            content=json.dumps(event),
            headers={"stripe-signature": VALID_SIGNATURE}
        )
        assert response.status_code == 200, response.text

        response = self.client.get(f"/api/v1/jobs/{job['id']}", headers=client_headers)
        assert response.json()["job"]["status"] == "paid"
        return response.json()["job"]


@pytest.fixture
def market(client: TestClient) -> Marketplace:
    return Marketplace(client)
