"""
Test configuration and fixtures for the property marketplace API.
Provides an application on in-memory SQLite, test data factories, and auth helpers.
"""

import pytest
import uuid
from typing import AsyncGenerator, Dict, Optional
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import Settings
from marketplace.database import Database
from marketplace.main import create_app
from marketplace.models.property import Property
from marketplace.models.user import User, UserRole
from marketplace.repositories.like import LikeRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository
from marketplace.utils.auth import CredentialService, ViewerContext
from marketplace.utils.locks import KeyedLockRegistry


TEST_SECRET_KEY = "test-secret-key-that-is-at-least-32-characters-long"
TEST_PASSWORD = "testpassword123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated in-memory database and a temporary upload dir."""
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite://",
        jwt_secret_key=TEST_SECRET_KEY,
        upload_dir=str(tmp_path / "uploads"),
        public_base_url=None,
        cors_origins=["http://test"],
    )


@pytest.fixture
async def app(settings: Settings):
    """Application with its schema created."""
    application = create_app(settings)
    await application.state.database.create_tables()
    yield application
    await application.state.database.dispose()


@pytest.fixture
def database(app) -> Database:
    return app.state.database


@pytest.fixture
def credentials(app) -> CredentialService:
    return app.state.credentials


@pytest.fixture
def like_locks(app) -> KeyedLockRegistry:
    return app.state.like_locks


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Session sharing the application's database."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client talking to the application in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def like_repository(db_session: AsyncSession) -> LikeRepository:
    return LikeRepository(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        credentials: CredentialService,
        email: Optional[str] = None,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        password: str = TEST_PASSWORD
    ) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user({
            "name": name,
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "hashed_password": credentials.hash_password(password),
            "role": role
        })


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        owner_id: uuid.UUID,
        title: str = "Test Property",
        description: str = "A beautiful test property",
        price: Decimal = Decimal("1000.00"),
        listing_type: str = "rent",
        bedrooms: int = 2,
        city: str = "Cairo",
        approved: bool = False,
        images: Optional[list] = None
    ) -> dict:
        """Create property data dictionary."""
        return {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "price": price,
            "listing_type": listing_type,
            "property_type": "apartment",
            "bedrooms": bedrooms,
            "bathrooms": 1,
            "area": 120,
            "city": city,
            "district": "Downtown",
            "images": images or [],
            "amenities": [],
            "approved": approved
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, owner_id: uuid.UUID, **overrides) -> Property:
        """Create a test property in the database."""
        data = PropertyFactory.create_property_data(owner_id, **overrides)
        return await property_repo.create_property(data)


# Common test fixtures
@pytest.fixture
async def test_owner(user_repository: UserRepository, credentials: CredentialService) -> User:
    return await UserFactory.create_user(
        user_repository, credentials, email="owner@test.com", name="Olivia Owner", role=UserRole.OWNER
    )


@pytest.fixture
async def test_user(user_repository: UserRepository, credentials: CredentialService) -> User:
    return await UserFactory.create_user(
        user_repository, credentials, email="user@test.com", name="Uma User", role=UserRole.USER
    )


@pytest.fixture
async def other_user(user_repository: UserRepository, credentials: CredentialService) -> User:
    return await UserFactory.create_user(
        user_repository, credentials, email="other@test.com", name="Oscar Other", role=UserRole.USER
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository, credentials: CredentialService) -> User:
    return await UserFactory.create_user(
        user_repository, credentials, email="admin@test.com", name="Ada Admin", role=UserRole.ADMIN
    )


@pytest.fixture
async def approved_property(property_repository: PropertyRepository, test_owner: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        test_owner.id,
        title="Approved Flat",
        price=Decimal("1500.00"),
        bedrooms=3,
        approved=True
    )


@pytest.fixture
async def pending_property(property_repository: PropertyRepository, test_owner: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        test_owner.id,
        title="Pending Villa",
        price=Decimal("5000.00"),
        bedrooms=5,
        approved=False
    )


# Helper fixtures
@pytest.fixture
def viewer_for():
    """Build the viewer context of an existing user."""
    def build(user: User) -> ViewerContext:
        return ViewerContext(user_id=user.id, role=user.role)
    return build


@pytest.fixture
def auth_headers(credentials: CredentialService):
    """Build an Authorization header carrying a fresh token for a user."""
    def build(user: User) -> Dict[str, str]:
        token = credentials.create_access_token(user_id=user.id, role=user.role)
        return {"Authorization": f"Bearer {token}"}
    return build


@pytest.fixture
def make_user(user_repository: UserRepository, credentials: CredentialService):
    """Create extra users inside a test."""
    async def build(**overrides) -> User:
        return await UserFactory.create_user(user_repository, credentials, **overrides)
    return build


@pytest.fixture
def make_property(property_repository: PropertyRepository):
    """Create extra properties inside a test."""
    async def build(owner_id: uuid.UUID, **overrides) -> Property:
        return await PropertyFactory.create_property(property_repository, owner_id, **overrides)
    return build
