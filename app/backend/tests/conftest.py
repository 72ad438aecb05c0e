"""Pytest configuration and fixtures."""
import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import sessionmaker
from app.backend.db.models import Base, RateType
from app.backend.db.seed import seed_database
from app.backend.db.session import build_engine, get_db
from app.backend.main import app
from app.backend.schemas.pricing import RateRecord
from fastapi.testclient import TestClient
import tempfile
import os


@pytest.fixture(scope="function")
def db_session():
    """Create a seeded test database session."""
    # Create temporary SQLite database
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)

    engine = build_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    seed_database(session)

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        os.unlink(db_path)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client (lifespan not run, so the app database is untouched)."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_rate():
    """Factory for rate snapshots handed directly to the pricing engine."""
    def _make_rate(
        rate_id: str,
        rate_type: str,
        amount: str,
        effective_date: str,
        end_date: str,
        currency: str = "USD",
        room_type_id: str = "rt_test"
    ) -> RateRecord:
        return RateRecord(
            rate_id=rate_id,
            room_type_id=room_type_id,
            rate_type=RateType(rate_type),
            amount=Decimal(amount),
            currency=currency,
            effective_date=date.fromisoformat(effective_date),
            end_date=date.fromisoformat(end_date),
        )
    return _make_rate


@pytest.fixture
def sample_booking_data():
    """Sample booking data for testing."""
    return {
        "unit_id": "unit_dt_desk_001",
        "customer_name": "Globex Ltd",
        "customer_email": "ops@globex.com",
        "start_date": "2025-03-01",
        "end_date": "2025-03-16"
    }


@pytest.fixture
def sample_rate_data():
    """Sample rate data for testing."""
    return {
        "room_type_id": "rt_meeting_large_dt",
        "rate_type": "daily",
        "amount": 400.00,
        "currency": "USD",
        "effective_date": "2025-01-01",
        "end_date": "2025-12-31"
    }
