import copy
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from marketplace.core.auth import AuthService
from marketplace.core.config import Settings
from marketplace.core.database import Base, Database
from marketplace.db.models import User

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

BASE_PAYLOAD = {
    "title": "Cozy 2 Bedroom Flat",
    "description": "Serviced two bedroom flat a short walk from the expressway.",
    "propertyType": "Flat/Apartment",
    "flatType": "2 Bedroom",
    "listingType": "For Rent",
    "furnishingStatus": "Semi-Furnished",
    "propertyCondition": "Good",
    "possessionStatus": "Ready to Move",
    "availableFrom": "2026-11-01",
    "address": {
        "street": "12 Admiralty Way",
        "area": "Lekki Phase 1",
        "city": "Lagos",
        "state": "Lagos",
    },
    "price": {"amount": 5000000},
    "bedrooms": 2,
    "bathrooms": 2,
    "contactPerson": [
        {
            "name": "Ada Obi",
            "phone": "+2348012345678",
            "email": "ada.obi@example.com",
            "role": "Agent",
        }
    ],
    "media": [
        {"url": "https://cdn.example.com/p/1.jpg", "type": "image", "category": "exterior", "subCategory": "cover"},
        {"url": "https://cdn.example.com/p/2.jpg", "type": "image", "category": "living room", "subCategory": "gallery"},
        {"url": "https://cdn.example.com/p/3.jpg", "type": "image", "category": "kitchen", "subCategory": "gallery"},
    ],
    "tags": ["waterfront", "serviced"],
}


@pytest.fixture
def make_payload():
    """Factory for valid property payloads with top-level overrides"""
    def _make(**overrides):
        payload = copy.deepcopy(BASE_PAYLOAD)
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        SECRET_KEY="test-secret-key",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return engine


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    """Create a test database session"""
    Base.metadata.create_all(bind=test_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def owner(test_db_session):
    user = User(email="owner@example.com", name="Ada Owner", roles=["agent"], active_role="agent")
    test_db_session.add(user)
    test_db_session.commit()
    return user


@pytest.fixture
def other_user(test_db_session):
    user = User(email="buyer@example.com", name="Bola Buyer", roles=["buyer"], active_role="buyer")
    test_db_session.add(user)
    test_db_session.commit()
    return user


@pytest.fixture
def client(test_engine, test_db_session, test_settings):
    """API client bound to the test database"""
    from marketplace.main import create_app

    app = create_app(test_settings, Database(test_engine))
    with TestClient(app) as test_client:
        yield test_client
        # Release the session's connection before app shutdown disposes the shared engine
        test_db_session.close()


@pytest.fixture
def auth_headers(owner, test_settings):
    token = AuthService.create_access_token({"sub": str(owner.id)}, test_settings)
    return {"Authorization": f"Bearer {token}"}
