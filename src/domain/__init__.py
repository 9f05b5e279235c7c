from .base import BaseModel, generate_uuid
from .client import Client
from .project import Project
from .user import User
from .task import Task
from .invoice import (
    Invoice,
    InvoiceStatus,
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    LOCKED_STATUSES,
    can_transition,
)
from .invoice_item import InvoiceItem
from .time_entry import TimeEntry, MINUTES_PER_HOUR

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Client",
    "Project",
    "User",
    "Task",
    "Invoice",
    "InvoiceStatus",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "LOCKED_STATUSES",
    "can_transition",
    "InvoiceItem",
    "TimeEntry",
    "MINUTES_PER_HOUR",
]
