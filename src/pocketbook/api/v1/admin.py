"""Administrative endpoints.

These are the only routes allowed to look across tenants, and only when
the caller says so explicitly with all_tenants=true. Naming neither a
tenant nor all tenants is an error, never an unfiltered query.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from pocketbook.api.deps import (
    get_account_repository,
    get_transaction_repository,
    require_admin_key,
)
from pocketbook.core.tenancy import admin_scope
from pocketbook.repositories.account import AccountRepository
from pocketbook.repositories.transaction import TransactionRepository
from pocketbook.schemas.admin import ScopeStats
from pocketbook.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)]
)


@router.get(
    "/stats",
    response_model=ScopeStats,
    summary="Row counts for one tenant or all tenants",
    responses={
        400: {"model": ErrorResponse, "description": "No scope named"},
        403: {"model": ErrorResponse, "description": "Administrative key missing or invalid"},
    },
)
async def scope_stats(
    request: Request,
    tenant_id: Annotated[str | None, Query(description="Tenant to count")] = None,
    all_tenants: Annotated[bool, Query(description="Count every tenant")] = False,
    accounts: AccountRepository = Depends(get_account_repository),
    transactions: TransactionRepository = Depends(get_transaction_repository),
) -> ScopeStats:
    scope = admin_scope(tenant_id, all_tenants)
    logger.info(
        "Administrative stats requested",
        extra={"tenant_id": str(scope.tenant_id) if scope.tenant_id else "*"},
    )

    return ScopeStats(
        tenant_id=scope.tenant_id,
        all_tenants=scope.all_tenants,
        accounts=await accounts.count(scope),
        transactions=await transactions.count(scope),
        merchant_memory_entries=request.app.state.memory.count(scope),
    )
