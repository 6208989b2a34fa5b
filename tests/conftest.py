"""
Pytest fixtures for the business card API.

The app runs against an in-memory SQLite database; tables are created
and dropped around every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["ENVIRONMENT"] = "development"

import pytest
from fastapi.testclient import TestClient

from bizcards import models  # noqa: F401  registers every table
from bizcards.core.config import settings
from bizcards.core.rate_limiter import PasswordAttemptTracker, RateLimiter
from bizcards.core.security import create_access_token
from bizcards.crud.user import user as user_crud
from bizcards.database import Base, SessionLocal, engine
from bizcards.models.company import Company
from bizcards.models.user import UserRole
from bizcards.schemas.employee import EmployeeCreate
from bizcards.services.auth import auth_service
from bizcards.services.employee import employee_service

ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fresh_limits(monkeypatch):
    """Isolate the process-wide rate limiter and password lockout per test."""
    monkeypatch.setattr(auth_service, "limiter", RateLimiter())
    monkeypatch.setattr(auth_service, "attempts", PasswordAttemptTracker())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def company(db):
    """Company that owns the test cards."""
    company = Company(name="CFM", slug="cfm", subscription_plan="basic")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def other_company(db):
    company = Company(name="Other Ports", slug="other-ports", subscription_plan="basic")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def company_admin(db, company):
    return user_crud.create(
        db,
        email="admin@cfm.co.mz",
        password=ADMIN_PASSWORD,
        role=UserRole.company_admin,
        company_id=company.id,
        first_name="Ana",
        last_name="Machava",
    )


@pytest.fixture
def employee_user(db, company):
    return user_crud.create(
        db,
        email="staff@cfm.co.mz",
        password=ADMIN_PASSWORD,
        role=UserRole.employee,
        company_id=company.id,
    )


@pytest.fixture
def super_admin(db):
    return user_crud.create(
        db,
        email="root@cfm.com",
        password=ADMIN_PASSWORD,
        role=UserRole.super_admin,
    )


@pytest.fixture
def login(client):
    """Attach a session cookie for the given user to the test client."""

    def _login(user):
        token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
        client.cookies.set(settings.COOKIE_NAME, token)
        return client

    return _login


@pytest.fixture
def employee_payload():
    """Valid employee form data as submitted by the dashboard."""
    return {
        "first_name": "Maria",
        "last_name": "Silva",
        "title": "Engineer",
        "contact_links": {
            "phone": "+258 84 123 4567",
            "email": "maria.silva@cfm.co.mz",
        },
    }


@pytest.fixture
def make_card(db, company):
    """Provision a card through the service for ``company``."""

    def _make_card(**overrides):
        payload = {
            "first_name": "Maria",
            "last_name": "Silva",
            "title": "Engineer",
            "contact_links": {"phone": "+258841234567", "email": "maria.silva@cfm.co.mz"},
        }
        payload.update(overrides)
        result = employee_service.create_employee(
            db=db,
            company_id=company.id,
            data=EmployeeCreate(**payload),
            caller_company_id=company.id,
        )
        assert result.success, result.error
        return result.data

    return _make_card
