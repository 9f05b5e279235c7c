import pytest_asyncio
from datetime import date
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from config import ApplicationConfig
from src.depends import get_session
from src.domain.client import Client
from src.domain.project import Project
from src.domain.task import Task
from src.domain.time_entry import TimeEntry
from src.domain.user import User

TENANT_ID = "tenant_it"
WEBHOOK_SECRET = "whsec_test"


class TestConfig(ApplicationConfig):
    __test__ = False

    API_PREFIX = ""
    AUTH_DISABLED = False
    ENABLE_LOGGING_MIDDLEWARE = False
    ENABLE_SENTRY = 0
    INVOICE_NOTIFICATION_WEBHOOK = None
    PAYMENT_WEBHOOK_SECRET = WEBHOOK_SECRET


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create an in-memory SQLite engine with all tables"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(db_session):
    """
    Client Acme with one project and task, Ann (50/h) and Bob (80/h), and
    two unbilled January entries: Ann 3h, Bob 2h on the same task.
    """
    client = Client(id="client_1", tenant_id=TENANT_ID, name="Acme Corp")
    project = Project(id="project_1", tenant_id=TENANT_ID, client_id="client_1", name="Website")
    task = Task(id="task_1", tenant_id=TENANT_ID, project_id="project_1", title="Landing page")
    users = [
        User(id="user_a", tenant_id=TENANT_ID, name="Ann", email="ann@example.com",
             hourly_rate=Decimal("50.00")),
        User(id="user_b", tenant_id=TENANT_ID, name="Bob", email="bob@example.com",
             hourly_rate=Decimal("80.00")),
        User(id="user_c", tenant_id=TENANT_ID, name="Cara", email="cara@example.com"),
    ]
    entries = [
        TimeEntry(id="entry_1", tenant_id=TENANT_ID, user_id="user_a", project_id="project_1",
                  task_id="task_1", work_date=date(2024, 1, 10), hours=3,
                  description="Wireframes"),
        TimeEntry(id="entry_2", tenant_id=TENANT_ID, user_id="user_b", project_id="project_1",
                  task_id="task_1", work_date=date(2024, 1, 11), hours=2,
                  description="Review"),
    ]

    db_session.add_all([client, project, task, *users, *entries])
    await db_session.commit()

    return {
        "tenant_id": TENANT_ID,
        "client_id": "client_1",
        "project_id": "project_1",
        "entry_ids": ["entry_1", "entry_2"],
    }


@pytest_asyncio.fixture
async def client(db_session):
    """Create test client with database session override"""
    from src.api.app import create_app

    app = create_app(TestConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class NoWebhookSecretConfig(TestConfig):
    __test__ = False

    PAYMENT_WEBHOOK_SECRET = None


@pytest_asyncio.fixture
async def client_without_webhook_secret(db_session):
    """Test client for an app deployed without PAYMENT_WEBHOOK_SECRET"""
    from src.api.app import create_app

    app = create_app(NoWebhookSecretConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
