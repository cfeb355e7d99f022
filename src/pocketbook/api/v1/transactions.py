"""Transaction query endpoints.

Listings are tenant-scoped and pass through the transaction projector,
so merchants confirmed after import show their category without any
write-back.
"""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from pocketbook.api.deps import (
    TenantId,
    get_projector,
    get_settings,
    get_transaction_repository,
)
from pocketbook.categorization.projector import TransactionProjector
from pocketbook.config import Settings
from pocketbook.core.exceptions import ResourceNotFoundError
from pocketbook.repositories.transaction import TransactionRepository
from pocketbook.schemas.common import ErrorResponse, MoneyMeta, PaginationMeta
from pocketbook.schemas.transaction import TransactionListResult, TransactionResponse

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _money_meta(app_settings: Settings) -> MoneyMeta:
    return MoneyMeta(
        currency=app_settings.currency, minor_unit=app_settings.currency_minor_unit
    )


@router.get(
    "",
    response_model=TransactionListResult,
    summary="List transactions",
    description="""
    Transactions for the caller's tenant, newest first.

    Transactions without a stored category get the category confirmed for
    their merchant (`category_source = merchant_memory`).
    """,
    responses={401: {"model": ErrorResponse, "description": "Tenant missing or malformed"}},
)
async def list_transactions(
    tenant_id: TenantId,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    limit: Annotated[int, Query(ge=1, le=100, description="Items per page (1-100)")] = 20,
    account_id: Annotated[str | None, Query(description="Filter by account ID")] = None,
    repo: TransactionRepository = Depends(get_transaction_repository),
    projector: TransactionProjector = Depends(get_projector),
    app_settings: Settings = Depends(get_settings),
) -> TransactionListResult:
    total = await repo.count_for_tenant(tenant_id, account_id=account_id)
    rows = await repo.list_for_tenant(
        tenant_id, skip=(page - 1) * limit, limit=limit, account_id=account_id
    )
    transactions = await projector.project(
        tenant_id, [TransactionResponse.model_validate(row) for row in rows]
    )

    return TransactionListResult(
        transactions=transactions,
        pagination=PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        ),
        money=_money_meta(app_settings),
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get one transaction",
    responses={
        401: {"model": ErrorResponse, "description": "Tenant missing or malformed"},
        404: {"model": ErrorResponse, "description": "Transaction not found"},
    },
)
async def get_transaction(
    transaction_id: str,
    tenant_id: TenantId,
    repo: TransactionRepository = Depends(get_transaction_repository),
    projector: TransactionProjector = Depends(get_projector),
) -> TransactionResponse:
    row = await repo.get_for_tenant(tenant_id, transaction_id)
    if row is None:
        raise ResourceNotFoundError(details={"transaction_id": transaction_id})
    projected = await projector.project(tenant_id, [TransactionResponse.model_validate(row)])
    return projected[0]
