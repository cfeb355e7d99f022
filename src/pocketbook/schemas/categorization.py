"""Categorization request/response schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pocketbook.categorization.models import CategorizationMethod


class _MerchantRequest(BaseModel):
    merchant_name: str = Field(description="Merchant display name", max_length=255)

    @field_validator("merchant_name")
    @classmethod
    def merchant_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Merchant name is required")
        return value


class CategorizeRequest(_MerchantRequest):
    """Request to categorize one merchant."""

    description: str | None = Field(None, description="Bank description", max_length=500)
    amount: Decimal | None = Field(None, description="Transaction amount")
    method: CategorizationMethod = Field(
        CategorizationMethod.AUTOMATIC,
        description="Strategy to use on a memory miss (automatic or hybrid; manual never resolves)",
    )


class SuggestionsRequest(_MerchantRequest):
    """Request for a ranked shortlist of categories."""

    description: str | None = Field(None, description="Bank description", max_length=500)
    amount: Decimal | None = Field(None, description="Transaction amount")
    max_suggestions: int | None = Field(
        None,
        ge=1,
        description="Maximum number of suggestions to return (configured default when omitted)",
    )


class ConfirmRequest(_MerchantRequest):
    """Request to remember a category for a merchant."""

    category_id: str = Field(description="Category identifier from the catalog", min_length=1)
    method: CategorizationMethod = Field(
        CategorizationMethod.MANUAL, description="How the user arrived at the choice"
    )

    @field_validator("method")
    @classmethod
    def method_not_cached(cls, value: CategorizationMethod) -> CategorizationMethod:
        if value == CategorizationMethod.CACHED:
            raise ValueError("cached only labels a merchant memory hit and cannot be confirmed")
        return value


class CategorizationResultResponse(BaseModel):
    category_id: str
    category_name: str
    group_id: str
    group_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    method: CategorizationMethod

    model_config = ConfigDict(from_attributes=True)


class CategorySuggestionResponse(BaseModel):
    category_id: str
    category_name: str
    group_id: str
    group_name: str
    score: float = Field(ge=0.0, le=1.0)
    reason: str = ""

    model_config = ConfigDict(from_attributes=True)


class ConfirmResponse(BaseModel):
    message: str
    result: CategorizationResultResponse


class CategoryResponse(BaseModel):
    """One catalog category."""

    id: str
    name: str
    group_id: str
    group_name: str
