"""
Pytest configuration and shared fixtures for testing.

Provides reusable test fixtures:
- test_db: In-memory SQLite database for isolated testing
- test_client: FastAPI TestClient for API integration tests
- tenant / sectors / workers: seeded rows most tests build on
- make_shift / make_assignment: factories for shifts and assignments
"""

import datetime
import os
import sys
from pathlib import Path

# The application engine must never touch a file database during tests
os.environ.setdefault("PLANTAO_DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from plantao.database.database import Base, Sector, Shift, ShiftAssignment, Tenant, Worker, get_db
from plantao.main import app


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    StaticPool keeps a single connection, so the TestClient thread sees the
    same database as the test.

    Yields:
        SQLAlchemy Session: Database session for test use
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def test_client(test_db):
    """
    Create FastAPI TestClient with test database dependency override.

    Yields:
        TestClient: FastAPI test client for API testing
    """

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def tenant(test_db):
    tenant = Tenant(id=1, name="Hospital Central", slug="central")
    test_db.add(tenant)
    test_db.commit()
    return tenant


@pytest.fixture(scope="function")
def sectors(test_db, tenant):
    """
    Two sectors:
    - ER: default day 400, night 500
    - ICU: no defaults
    """
    er = Sector(id=10, tenant_id=tenant.id, name="ER", default_day_value=400.0, default_night_value=500.0)
    icu = Sector(id=11, tenant_id=tenant.id, name="ICU")
    test_db.add_all([er, icu])
    test_db.commit()
    return {"ER": er, "ICU": icu}


@pytest.fixture(scope="function")
def workers(test_db, tenant):
    ana = Worker(id=100, tenant_id=tenant.id, name="Ana")
    bruno = Worker(id=101, tenant_id=tenant.id, name="Bruno")
    test_db.add_all([ana, bruno])
    test_db.commit()
    return {"Ana": ana, "Bruno": bruno}


@pytest.fixture(scope="function")
def make_shift(test_db, tenant):
    """Factory: make_shift(date, "19:00", "07:00", sector=..., base_value=...)."""

    def _make(date, start="08:00", end="20:00", sector=None, base_value=None):
        shift = Shift(
            tenant_id=tenant.id,
            sector_id=sector.id if sector is not None else None,
            date=date,
            start_time=datetime.datetime.strptime(start, "%H:%M").time(),
            end_time=datetime.datetime.strptime(end, "%H:%M").time(),
            base_value=base_value,
        )
        test_db.add(shift)
        test_db.commit()
        return shift

    return _make


@pytest.fixture(scope="function")
def make_assignment(test_db, tenant):
    """Factory: make_assignment(shift, worker, cached_value=None)."""

    def _make(shift, worker, cached_value=None):
        assignment = ShiftAssignment(
            tenant_id=tenant.id,
            shift_id=shift.id,
            worker_id=worker.id,
            cached_value=cached_value,
        )
        test_db.add(assignment)
        test_db.commit()
        return assignment

    return _make
