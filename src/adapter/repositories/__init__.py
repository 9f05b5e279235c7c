from .client_repository import SqlAlchemyClientRepository
from .project_repository import SqlAlchemyProjectRepository
from .user_repository import SqlAlchemyUserRepository
from .task_repository import SqlAlchemyTaskRepository
from .time_entry_repository import SqlAlchemyTimeEntryRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_item_repository import SqlAlchemyInvoiceItemRepository

__all__ = [
    "SqlAlchemyClientRepository",
    "SqlAlchemyProjectRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyTaskRepository",
    "SqlAlchemyTimeEntryRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceItemRepository",
]
