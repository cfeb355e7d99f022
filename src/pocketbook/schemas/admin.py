"""Administrative response schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


class ScopeStats(BaseModel):
    """Row counts within an administrative scope."""

    tenant_id: UUID | None = Field(None, description="Tenant counted, or null for all tenants")
    all_tenants: bool = Field(description="True when every tenant was counted")
    accounts: int
    transactions: int
    merchant_memory_entries: int = Field(
        description="Merchant memory entries held by this process"
    )
