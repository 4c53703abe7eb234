"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sms_gateway.api.dependencies import get_engine
from sms_gateway.api.main import create_app
from sms_gateway.config import settings
from sms_gateway.domain.engine import TransactionEngine
from sms_gateway.infrastructure.database.models import Base
from sms_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def received_at() -> datetime:
    """Fixed naive-UTC receive time"""
    return datetime(2024, 2, 15, 10, 30, 0)


@pytest.fixture
def transaction_engine() -> TransactionEngine:
    """Fresh engine with an empty duplicate cache"""
    return TransactionEngine()


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
def client(db: Session, transaction_engine: TransactionEngine) -> TestClient:
    """Create FastAPI test client with test database and a per-test engine"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: transaction_engine
    return TestClient(app)


@pytest.fixture
def automatic_mode(monkeypatch):
    """Store accepted transactions directly instead of queueing them for review"""
    monkeypatch.setattr(settings, "transaction_mode", "automatic")


@pytest.fixture
def manual_mode(monkeypatch):
    monkeypatch.setattr(settings, "transaction_mode", "manual")
    monkeypatch.setattr(settings, "review_webhook_url", None)
