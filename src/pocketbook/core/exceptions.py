"""Exception hierarchy for the categorization service.

Every exception carries an error_code that maps to the catalog in
errors.py, plus the HTTP status the API layer should answer with.
"""

from typing import Any


class CategorizationServiceError(Exception):
    """Base exception for all service errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "CAT_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    default_code = "SYS_001"
    default_status = 500

    def __init__(
        self,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
    ):
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.http_status = http_status or self.default_status
        super().__init__(self.error_code)


class TenantResolutionError(CategorizationServiceError):
    """Raised when the tenant credential is absent or malformed.

    Always fatal to the request; there is no fallback tenant.
    TENANT_001 means missing, TENANT_002 means unparsable.
    """

    default_code = "TENANT_001"
    default_status = 401


class AdminAccessError(CategorizationServiceError):
    """Raised when an administrative endpoint is called without a valid key."""

    default_code = "AUTH_001"
    default_status = 403


class AdminScopeError(CategorizationServiceError):
    """Raised when an administrative call names neither a tenant nor all tenants."""

    default_code = "TENANT_003"
    default_status = 400


class UnknownCategoryError(CategorizationServiceError):
    """Raised when a confirmation names a category id absent from the catalog."""

    default_code = "CAT_001"
    default_status = 400


class GroupNotFoundError(CategorizationServiceError):
    """Raised when a category group name is not in the catalog."""

    default_code = "CAT_002"
    default_status = 404


class NoResultError(CategorizationServiceError):
    """Raised by the API layer when categorization produced nothing usable.

    Not a fault: the merchant is simply still uncategorized.
    """

    default_code = "CAT_003"
    default_status = 422


class BackendUnavailableError(CategorizationServiceError):
    """Raised by the text-generation adapter.

    Absorbed by the strategy layer; never reaches an API caller.
    """

    default_code = "CAT_004"
    default_status = 503


class InvalidRequestError(CategorizationServiceError):
    """Raised for request values that pass schema validation but not app limits."""

    default_code = "VAL_001"
    default_status = 400


class InvalidMerchantError(InvalidRequestError):
    """Raised when neither merchant name nor description yields a merchant key."""


class ResourceNotFoundError(CategorizationServiceError):
    """Raised when a tenant-scoped record does not exist for the caller's tenant."""

    default_code = "API_001"
    default_status = 404
