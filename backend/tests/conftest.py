"""
Aether Intel - Test Configuration and Fixtures

Shared SQLite test database, a TestClient with dependency overrides, token
helpers, and in-process fakes for the page fetcher and the analysis service.
"""
import os
import sys
import uuid
import pytest
from typing import Dict, Generator, List, Optional, Union

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ['TESTING'] = 'true'
os.environ['DATABASE_URL'] = 'sqlite:///./test_aether_intel.db'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['METRICS_ENABLED'] = 'false'
os.environ.setdefault('SECRET_KEY', 'test-secret-key-for-pytest-do-not-use-in-prod')

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient


# ==============================================================================
# Database Fixtures
# ==============================================================================

TEST_DATABASE_URL = "sqlite:///./test_aether_intel.db"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)


@event.listens_for(test_engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="session")
def engine():
    """Create a test database engine."""
    from database import Base
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    # Cleanup after all tests
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator:
    """Create a new database session for each test."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def override_get_db():
    """Dependency override for FastAPI's get_db."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# ==============================================================================
# Fakes for the pipeline collaborators
# ==============================================================================

class FakeAnalysisClient:
    """Stands in for ai_client.AnalysisClient.

    ``responses`` are returned in order; an Exception instance is raised
    instead of returned.
    """

    def __init__(self, responses: Optional[List[Union[str, Exception]]] = None, configured: bool = True):
        self.responses = list(responses or [])
        self.configured = configured
        self.prompts: List[str] = []
        self.model = "fake-model"

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self.responses.pop(0) if self.responses else "{}"
        if isinstance(response, Exception):
            raise response
        return response


class FakeFetcher:
    """Stands in for sources.PageFetcher.

    ``pages`` maps identifier -> content (str/None) or an Exception to raise.
    """

    def __init__(self, pages: Optional[Dict[str, Union[str, None, Exception]]] = None):
        self.pages = dict(pages or {})
        self.calls: List[tuple] = []

    async def fetch(self, identifier: str, platform: str) -> Optional[str]:
        self.calls.append((identifier, platform))
        result = self.pages.get(identifier)
        if isinstance(result, Exception):
            raise result
        return result


# ==============================================================================
# App / client fixtures
# ==============================================================================

@pytest.fixture(scope="module")
def test_client(engine) -> Generator:
    """Create a test client for the FastAPI application with database override."""
    from main import app
    from database import get_db

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up the override
    app.dependency_overrides.clear()


@pytest.fixture
def fake_analysis(test_client):
    """Install a FakeAnalysisClient for the duration of one test."""
    from main import app
    from dependencies import get_analysis_service

    fake = FakeAnalysisClient()
    app.dependency_overrides[get_analysis_service] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_analysis_service, None)


@pytest.fixture
def fake_fetcher(test_client):
    """Install a FakeFetcher for the duration of one test."""
    from main import app
    from dependencies import get_page_fetcher

    fake = FakeFetcher()
    app.dependency_overrides[get_page_fetcher] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_page_fetcher, None)


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================

def _create_user(email_prefix: str = "user") -> Dict[str, str]:
    from database import User

    user_id = f"user_{uuid.uuid4().hex[:12]}"
    session = TestingSessionLocal()
    try:
        session.add(User(id=user_id, email=f"{email_prefix}-{user_id}@example.com", name="Test User"))
        session.commit()
    finally:
        session.close()
    return {"id": user_id, "email": f"{email_prefix}-{user_id}@example.com"}


def auth_headers_for(user: Dict[str, str]) -> Dict[str, str]:
    from auth import create_access_token
    token = create_access_token({"sub": user["id"], "email": user["email"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(engine):
    return _create_user("owner")


@pytest.fixture
def other_user(engine):
    return _create_user("other")


@pytest.fixture
def auth_headers(user):
    return auth_headers_for(user)


@pytest.fixture
def other_auth_headers(other_user):
    return auth_headers_for(other_user)


def create_competitor(user_id: str, accounts=(), **fields) -> int:
    """Insert a competitor (and optional social accounts); returns its id."""
    from database import Competitor, SocialAccount

    session = TestingSessionLocal()
    try:
        competitor = Competitor(
            user_id=user_id,
            name=fields.pop("name", f"Acme {uuid.uuid4().hex[:6]}"),
            website_url=fields.pop("website_url", "https://example.com"),
            **fields,
        )
        session.add(competitor)
        session.flush()
        for account in accounts:
            session.add(SocialAccount(competitor_id=competitor.id, **account))
        session.commit()
        return competitor.id
    finally:
        session.close()


@pytest.fixture
def sample_competitor(user):
    """Competitor with a website and one active Twitter account."""
    competitor_id = create_competitor(
        user["id"],
        accounts=[{"platform": "twitter", "handle": "acme", "is_active": True}],
        name="Acme Corp",
    )
    return {"id": competitor_id, "name": "Acme Corp", "user_id": user["id"]}


def count_insights(competitor_id: int) -> int:
    from database import Insight

    session = TestingSessionLocal()
    try:
        return session.query(Insight).filter(Insight.competitor_id == competitor_id).count()
    finally:
        session.close()


# ==============================================================================
# Utility Functions
# ==============================================================================

def assert_valid_response(response, expected_status=200):
    """Assert that an API response is valid."""
    assert response.status_code == expected_status, f"Expected {expected_status}, got {response.status_code}: {response.text}"
    return response.json()
