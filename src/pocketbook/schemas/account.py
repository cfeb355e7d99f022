"""Account response schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AccountResponse(BaseModel):
    """Account data for API responses."""

    id: str
    name: str
    type: str = Field(description="Account type, e.g. CHECKING or CREDITCARD")
    status: str = Field(description="ACTIVE or INACTIVE")
    balance_current: Decimal = Field(description="Current balance in major units")
    currency: str = Field(description="ISO currency code")
    connection_name: str | None = Field(None, description="Bank/connection display name")

    model_config = ConfigDict(from_attributes=True)


class AccountListResult(BaseModel):
    accounts: list[AccountResponse]
