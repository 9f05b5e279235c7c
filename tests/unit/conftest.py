import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.domain.client import Client
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.project import Project
from src.domain.task import Task
from src.domain.time_entry import TimeEntry
from src.domain.user import User

TENANT_ID = "tenant_123"


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def make_entry():
    """Factory for unbilled time entries"""
    def _make(
        user_id,
        hours,
        task_id=None,
        work_date=date(2024, 1, 10),
        description=None,
        project_id="project_1",
        entry_id=None,
    ):
        entry = TimeEntry(
            tenant_id=TENANT_ID,
            user_id=user_id,
            project_id=project_id,
            task_id=task_id,
            work_date=work_date,
            hours=hours,
            billable=True,
            description=description,
        )
        if entry_id:
            entry.id = entry_id
        return entry
    return _make


@pytest.fixture
def make_user():
    """Factory for contributors"""
    def _make(user_id, name, hourly_rate=None):
        return User(
            id=user_id,
            tenant_id=TENANT_ID,
            name=name,
            email=f"{user_id}@example.com",
            hourly_rate=Decimal(hourly_rate) if hourly_rate is not None else None,
        )
    return _make


@pytest.fixture
def make_invoice():
    """Factory for persisted invoices"""
    def _make(status=InvoiceStatus.DRAFT, **overrides):
        now = datetime.utcnow()
        fields = dict(
            id="invoice_1",
            tenant_id=TENANT_ID,
            client_id="client_1",
            invoice_number="INV-20240131-482913",
            status=status,
            issue_date=date(2024, 1, 31),
            due_date=date(2024, 2, 15),
            subtotal=Decimal("310.00"),
            tax_rate=Decimal("18.00"),
            tax_amount=Decimal("55.80"),
            total=Decimal("365.80"),
            currency_code="USD",
            created_by="manager_1",
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Invoice(**fields)
    return _make


@pytest.fixture
def sample_client():
    return Client(id="client_1", tenant_id=TENANT_ID, name="Acme Corp")


@pytest.fixture
def sample_project():
    return Project(id="project_1", tenant_id=TENANT_ID, client_id="client_1", name="Website")


@pytest.fixture
def sample_task():
    return Task(id="task_1", tenant_id=TENANT_ID, project_id="project_1", title="Landing page")


@pytest.fixture
def mock_client_repo(sample_client):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=sample_client)
    return repo


@pytest.fixture
def mock_project_repo(sample_project):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=sample_project)
    repo.get_by_client_id = AsyncMock(return_value=[sample_project])
    return repo


@pytest.fixture
def mock_time_entry_repo():
    repo = MagicMock()
    repo.find_unbilled_entries = AsyncMock(return_value=[])
    repo.claim_entries = AsyncMock(return_value=0)
    repo.release_entries = AsyncMock(return_value=0)
    return repo


@pytest.fixture
def mock_user_repo():
    repo = MagicMock()
    repo.get_by_ids = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_task_repo(sample_task):
    repo = MagicMock()
    repo.get_by_ids = AsyncMock(return_value=[sample_task])
    return repo


@pytest.fixture
def mock_invoice_repo():
    """Invoice repository whose create/update echo the entity back"""
    repo = MagicMock()

    async def echo(invoice):
        return invoice

    repo.create = AsyncMock(side_effect=echo)
    repo.update = AsyncMock(side_effect=echo)
    repo.update_status = AsyncMock(return_value=True)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.list_by_tenant = AsyncMock(return_value=[])
    repo.exists_by_invoice_number = AsyncMock(return_value=False)
    return repo


@pytest.fixture
def mock_invoice_item_repo():
    repo = MagicMock()

    async def echo(item):
        return item

    repo.create = AsyncMock(side_effect=echo)
    repo.get_by_invoice_id = AsyncMock(return_value=[])
    repo.soft_delete_by_invoice_id = AsyncMock(return_value=0)
    return repo
