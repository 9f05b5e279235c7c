from .client_repository import ClientRepository
from .project_repository import ProjectRepository
from .user_repository import UserRepository
from .task_repository import TaskRepository
from .time_entry_repository import TimeEntryRepository
from .invoice_repository import InvoiceRepository
from .invoice_item_repository import InvoiceItemRepository

__all__ = [
    "ClientRepository",
    "ProjectRepository",
    "UserRepository",
    "TaskRepository",
    "TimeEntryRepository",
    "InvoiceRepository",
    "InvoiceItemRepository",
]
