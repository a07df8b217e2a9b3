"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from quantara_gateway.api.main import create_app
from quantara_gateway.domain.capital import create_pool
from quantara_gateway.domain.models import CapitalPool, RiskInputs, RiskTier
from quantara_gateway.infrastructure.database.models import Base
from quantara_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sample_inputs() -> RiskInputs:
    """Worked example: weighted sum 74.2 -> score 74, tier A"""
    return RiskInputs(
        income_stability=78,
        repayment_history=85,
        sector_coefficient=1.1,
        liquidity_buffer=62,
    )


@pytest.fixture
def empty_pool(now: datetime) -> CapitalPool:
    return create_pool(
        name="Test Pool",
        total_capital=1_000_000,
        target_yield=8.0,
        risk_tier_filter=[RiskTier.AAA, RiskTier.AA, RiskTier.A],
        now=now,
    )
