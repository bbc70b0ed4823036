"""
Shared pytest fixtures for API tests.

This module provides test fixtures that work with the dependency injection
architecture. Key patterns:

1. Database Isolation: Each test gets a fresh in-memory MongoDB (mongomock)
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Service Injection: Services are created with test repositories
4. Real Auth: Tokens are signed with the test secret, no auth override

Fixture Hierarchy:
    test_db → repositories → services → test_app → client
"""
import os

import mongomock
import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set test JWT secret before importing config modules
# This must happen before any config imports
TEST_JWT_SECRET = "test-jwt-secret-for-testing-purposes-1234567890"
os.environ.setdefault("CLINIC_SVC_JWT_SECRET", TEST_JWT_SECRET)

from core import dependencies as deps
from core.exceptions import setup_exception_handlers
from models import PATIENT, SPECIALIST
from repositories import Database, ResourceRepository
from services import ResourceService
from tests.factories import auth_headers, patient_payload, specialist_payload


@pytest.fixture
def test_db():
    """
    Create an in-memory database for testing.

    Each test gets its own mongomock client, so no state leaks between tests.
    """
    db = Database(db_name="clinic_test", client=mongomock.MongoClient(tz_aware=True))
    db.ensure_indexes([PATIENT, SPECIALIST])
    yield db
    db.close()


@pytest.fixture
def patient_repo(test_db):
    """Create a ResourceRepository for patients with the test database."""
    return ResourceRepository(db=test_db, descriptor=PATIENT)


@pytest.fixture
def specialist_repo(test_db):
    """Create a ResourceRepository for specialists with the test database."""
    return ResourceRepository(db=test_db, descriptor=SPECIALIST)


@pytest.fixture
def patient_service(patient_repo):
    """Create a ResourceService for patients with the test repository."""
    return ResourceService(repository=patient_repo)


@pytest.fixture
def specialist_service(specialist_repo):
    """Create a ResourceService for specialists with the test repository."""
    return ResourceService(repository=specialist_repo)


@pytest.fixture
def test_app(test_db, patient_repo, specialist_repo, patient_service, specialist_service):
    """
    Create a FastAPI test app with dependency overrides.

    - Uses the real routers (testing actual endpoint code)
    - Injects the test database and services via dependency_overrides
    - Registers exception handlers for proper error response testing
    """
    from api.routers import health_router, patients_router, specialists_router

    app = FastAPI(title="Clinic Service API Test")

    # Register exception handlers (same as production)
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: test_db
    app.dependency_overrides[deps.get_patient_repository] = lambda: patient_repo
    app.dependency_overrides[deps.get_specialist_repository] = lambda: specialist_repo
    app.dependency_overrides[deps.get_patient_service] = lambda: patient_service
    app.dependency_overrides[deps.get_specialist_service] = lambda: specialist_service

    app.include_router(health_router)
    app.include_router(patients_router)
    app.include_router(specialists_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


@pytest.fixture
def admin_headers():
    """Headers for an admin caller that has no record of its own."""
    return auth_headers(ObjectId(), "admin")


@pytest.fixture
def existing_patient(patient_repo):
    """A stored patient record."""
    return patient_repo.create(patient_payload())


@pytest.fixture
def patient_headers(existing_patient):
    """Headers for the caller owning ``existing_patient``."""
    return auth_headers(existing_patient.id, "patient")


@pytest.fixture
def existing_specialist(specialist_repo):
    """A stored specialist record."""
    return specialist_repo.create(specialist_payload())


@pytest.fixture
def specialist_headers(existing_specialist):
    """Headers for the caller owning ``existing_specialist``."""
    return auth_headers(existing_specialist.id, "specialist")
