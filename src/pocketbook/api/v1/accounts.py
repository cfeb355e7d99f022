"""Account endpoints."""

from fastapi import APIRouter, Depends

from pocketbook.api.deps import TenantId, get_account_repository
from pocketbook.repositories.account import AccountRepository
from pocketbook.schemas.account import AccountListResult, AccountResponse
from pocketbook.schemas.common import ErrorResponse

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get(
    "",
    response_model=AccountListResult,
    summary="List the caller's accounts",
    responses={401: {"model": ErrorResponse, "description": "Tenant missing or malformed"}},
)
async def list_accounts(
    tenant_id: TenantId,
    repo: AccountRepository = Depends(get_account_repository),
) -> AccountListResult:
    accounts = await repo.list_for_tenant(tenant_id)
    return AccountListResult(accounts=[AccountResponse.model_validate(a) for a in accounts])
