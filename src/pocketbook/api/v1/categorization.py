"""Merchant categorization endpoints."""

from fastapi import APIRouter, Depends

from pocketbook.api.deps import TenantId, get_categorization_service, get_settings
from pocketbook.categorization.models import Category
from pocketbook.categorization.service import CategorizationService
from pocketbook.config import Settings
from pocketbook.core.exceptions import InvalidRequestError, NoResultError
from pocketbook.schemas.categorization import (
    CategorizationResultResponse,
    CategorizeRequest,
    CategoryResponse,
    CategorySuggestionResponse,
    ConfirmRequest,
    ConfirmResponse,
    SuggestionsRequest,
)
from pocketbook.schemas.common import ErrorResponse

router = APIRouter(prefix="/categorization", tags=["categorization"])


def _category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        group_id=category.group.id,
        group_name=category.group.name,
    )


@router.post(
    "/categorize",
    response_model=CategorizationResultResponse,
    summary="Categorize a merchant",
    description="""
    Resolve a category for a merchant.

    A merchant confirmed earlier for this tenant is answered from merchant
    memory (method `cached`). Otherwise the requested strategy runs; a
    successful result is remembered for next time.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Tenant missing or malformed"},
        422: {"model": ErrorResponse, "description": "No category could be determined"},
    },
)
async def categorize_merchant(
    payload: CategorizeRequest,
    tenant_id: TenantId,
    service: CategorizationService = Depends(get_categorization_service),
) -> CategorizationResultResponse:
    result = await service.categorize(
        tenant_id,
        payload.merchant_name,
        payload.description,
        payload.amount,
        payload.method,
    )
    if result is None:
        raise NoResultError(details={"method": payload.method.value})
    return CategorizationResultResponse.model_validate(result)


@router.post(
    "/suggestions",
    response_model=list[CategorySuggestionResponse],
    summary="Suggest categories for a merchant",
    description="""
    Ranked shortlist (best first) for the user to choose from.
    Suggestions are provisional: merchant memory is neither read nor written.
    An empty list means no suggestion could be produced.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Tenant missing or malformed"},
    },
)
async def suggest_categories(
    payload: SuggestionsRequest,
    tenant_id: TenantId,
    service: CategorizationService = Depends(get_categorization_service),
    app_settings: Settings = Depends(get_settings),
) -> list[CategorySuggestionResponse]:
    if (
        payload.max_suggestions is not None
        and payload.max_suggestions > app_settings.suggestions_max_count
    ):
        raise InvalidRequestError(
            details={"field": "max_suggestions", "max": app_settings.suggestions_max_count}
        )
    suggestions = await service.suggestions(
        tenant_id,
        payload.merchant_name,
        payload.description,
        payload.amount,
        payload.max_suggestions,
    )
    return [CategorySuggestionResponse.model_validate(s) for s in suggestions]


@router.post(
    "/confirm",
    response_model=ConfirmResponse,
    summary="Confirm a category for a merchant",
    description="""
    Remember the chosen category for this merchant (tenant-scoped).
    Every past and future transaction from the merchant without a stored
    category will show it. Re-confirming overwrites the earlier choice.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown category or invalid request"},
        401: {"model": ErrorResponse, "description": "Tenant missing or malformed"},
    },
)
async def confirm_category(
    payload: ConfirmRequest,
    tenant_id: TenantId,
    service: CategorizationService = Depends(get_categorization_service),
) -> ConfirmResponse:
    result = await service.confirm(
        tenant_id, payload.merchant_name, payload.category_id, payload.method
    )
    return ConfirmResponse(
        message="Category confirmed successfully",
        result=CategorizationResultResponse.model_validate(result),
    )


@router.get(
    "/categories",
    response_model=dict[str, list[CategoryResponse]],
    summary="List categories grouped by spending group",
)
async def list_categories(
    service: CategorizationService = Depends(get_categorization_service),
) -> dict[str, list[CategoryResponse]]:
    return {
        group: [_category_response(c) for c in categories]
        for group, categories in service.grouped_catalog().items()
    }


@router.get(
    "/categories/{group_name}",
    response_model=list[CategoryResponse],
    summary="List categories of one spending group",
    responses={404: {"model": ErrorResponse, "description": "Group not found"}},
)
async def list_group_categories(
    group_name: str,
    service: CategorizationService = Depends(get_categorization_service),
) -> list[CategoryResponse]:
    return [_category_response(c) for c in service.group_categories(group_name)]
