"""Schemas shared by list endpoints."""

from pydantic import BaseModel, Field


class MoneyMeta(BaseModel):
    """Metadata describing how monetary amounts are represented."""

    currency: str = Field(description="ISO currency code (e.g., NZD)")
    minor_unit: int = Field(
        description="Number of decimal places for the currency (e.g., 2 for cents)"
    )


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    page: int = Field(description="Current page number (1-indexed)")
    limit: int = Field(description="Items per page")
    total: int = Field(description="Total number of items")
    total_pages: int = Field(description="Total number of pages")


class ErrorResponse(BaseModel):
    """Error envelope returned by every endpoint."""

    error_code: str = Field(description="Error code from catalog")
    message: str = Field(description="Technical error message")
    user_message: str = Field(description="User-friendly error message")
    suggestion: str = Field(description="Actionable guidance")
    retry_allowed: bool = Field(description="Whether the operation can be retried")
