"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.market_data import PriceRefreshTracker, get_batch_session, get_refresh_tracker
from database import Base, get_db
from main import app
from services.batch_session import BatchSession
from services.price_update_service import PriceUpdateService
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import security, security_with_history  # noqa: F401
from tests.fixtures.mocks import MockQuoteSource, MockSymbolResolver, SAMPLE_DOCUMENTS


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="quote_source")
def quote_source_fixture():
    """A quote source serving the sample documents."""
    return MockQuoteSource(documents=dict(SAMPLE_DOCUMENTS))


@pytest.fixture(name="price_service")
def price_service_fixture(quote_source):
    """A PriceUpdateService wired to mock collaborators."""
    return PriceUpdateService(resolver=MockSymbolResolver(), quote_source=quote_source)


@pytest.fixture(name="batch_session")
def batch_session_fixture(db, price_service):
    """A BatchSession that runs against the test database."""
    session = BatchSession(service=price_service, session_factory=lambda: db)
    yield session
    session.shutdown()


@pytest.fixture(name="client")
def client_fixture(db, batch_session):
    """Create a test client with the test database and mocked quote source."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    tracker = PriceRefreshTracker()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_batch_session] = lambda: batch_session
    app.dependency_overrides[get_refresh_tracker] = lambda: tracker
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
