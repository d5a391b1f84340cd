"""
ComplaintDesk - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator
import uuid
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_complaintdesk.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['IDENTITY_PROVIDER'] = 'local'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.account import Account, AccountRole
from app.models.complaint import Complaint, ComplaintCategory
from app.services.complaint_service import ComplaintService

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_complaintdesk.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_account(db: AsyncSession, role: AccountRole = AccountRole.USER,
                         email: str = None) -> Account:
    account = Account(
        external_id=str(uuid.uuid4()),
        email=(email or fake.unique.email()).lower(),
        role=role,
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


def headers_for(account: Account) -> dict:
    token = create_access_token(
        account_id=account.id,
        email=account.email,
        role=account.role.value,
    )
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> Account:
    """Create a regular account"""
    return await create_account(db_session)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> Account:
    """Create a second regular account"""
    return await create_account(db_session)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Account:
    """Create an admin account"""
    return await create_account(db_session, role=AccountRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: Account) -> dict:
    """Authentication headers for test_user"""
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: Account) -> dict:
    """Authentication headers for other_user"""
    return headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user: Account) -> dict:
    """Authentication headers for admin_user"""
    return headers_for(admin_user)


@pytest.fixture
def complaint_data() -> dict:
    """Valid complaint payload"""
    return {
        'title': fake.sentence(nb_words=5)[:100],
        'description': fake.paragraph(),
        'category': ComplaintCategory.TECHNICAL.value,
    }


@pytest.fixture
async def test_complaint(db_session: AsyncSession, test_user: Account, complaint_data: dict) -> Complaint:
    """A Pending complaint owned by test_user"""
    return await ComplaintService(db_session).create(complaint_data, owner_id=test_user.id)


@pytest.fixture
def make_account(db_session: AsyncSession):
    """Factory for extra accounts"""
    async def _make(role: AccountRole = AccountRole.USER, email: str = None) -> Account:
        return await create_account(db_session, role=role, email=email)
    return _make


@pytest.fixture
def make_headers():
    """Factory for authentication headers"""
    return headers_for
