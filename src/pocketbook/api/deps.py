"""FastAPI dependency injection for tenant scoping, services and database."""

import hmac
import logging
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pocketbook.categorization.projector import TransactionProjector
from pocketbook.categorization.service import CategorizationService
from pocketbook.config import Settings
from pocketbook.core.exceptions import AdminAccessError
from pocketbook.db.session import get_db
from pocketbook.repositories.account import AccountRepository
from pocketbook.repositories.transaction import TransactionRepository

logger = logging.getLogger(__name__)


async def get_tenant_id(request: Request) -> UUID:
    """
    Resolve the caller's tenant with the resolver chosen at startup.

    The resolved id is also put on request.state for request logging.

    Raises:
        TenantResolutionError: If the credential is absent or malformed
    """
    tenant_id = request.app.state.tenant_resolver.resolve(request)
    request.state.tenant_id = tenant_id
    return tenant_id


def get_categorization_service(request: Request) -> CategorizationService:
    return request.app.state.categorization_service


def get_projector(request: Request) -> TransactionProjector:
    return request.app.state.projector


async def get_transaction_repository(
    db: AsyncSession = Depends(get_db),
) -> TransactionRepository:
    return TransactionRepository(db)


async def get_account_repository(
    db: AsyncSession = Depends(get_db),
) -> AccountRepository:
    return AccountRepository(db)


def get_settings(request: Request) -> Settings:
    """Settings the app was built with."""
    return request.app.state.settings


async def require_admin_key(
    request: Request,
    x_admin_key: Annotated[str | None, Header(alias="X-Admin-Key")] = None,
) -> None:
    """
    Guard administrative endpoints.

    Refuses every call when no admin key is configured.

    Raises:
        AdminAccessError: If the key is missing, wrong, or not configured
    """
    expected = get_settings(request).admin_api_key
    if not expected or not x_admin_key or not hmac.compare_digest(
        x_admin_key.encode(), expected.encode()
    ):
        logger.warning("Administrative access refused")
        raise AdminAccessError()


TenantId = Annotated[UUID, Depends(get_tenant_id)]
