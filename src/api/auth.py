"""Caller identity

Authentication happens upstream; the gateway forwards the caller as
X-Tenant-ID / X-User-ID / X-User-Role headers.
"""

from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Header, status
from libs.result import Error
from src.api.error import ClientError
from src.depends import get_config

BILLING_ROLES = frozenset({"OWNER", "MANAGER", "ADMIN"})


@dataclass(frozen=True)
class Caller:
    tenant_id: str
    user_id: str
    role: Optional[str] = None


async def get_caller(
    x_tenant_id: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    config=Depends(get_config),
) -> Caller:
    """Resolve the caller and require a billing role"""
    if not x_tenant_id or not x_user_id:
        raise ClientError(
            Error(
                code="UNAUTHENTICATED",
                message="Missing caller identity",
                reason="X-Tenant-ID and X-User-ID headers are required",
            ),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    role = x_user_role.upper() if x_user_role else None
    if not config.AUTH_DISABLED and role not in BILLING_ROLES:
        raise ClientError(
            Error(
                code="FORBIDDEN",
                message="Only owners, managers and admins can manage invoices",
                reason=f"role={x_user_role}",
            ),
            status_code=status.HTTP_403_FORBIDDEN,
        )

    return Caller(tenant_id=x_tenant_id, user_id=x_user_id, role=role)
