"""Error codes and user-friendly messages.

Each error has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

ERROR_CATALOG: dict[str, dict] = {
    "TENANT_001": {
        "code": "TENANT_001",
        "message": "Tenant credential missing from request",
        "user_message": "We couldn't tell which account this request belongs to.",
        "suggestion": "Sign in again, or send the tenant identifier with the request.",
        "retry_allowed": False,
    },
    "TENANT_002": {
        "code": "TENANT_002",
        "message": "Tenant credential is malformed",
        "user_message": "The account identifier on this request is not valid.",
        "suggestion": "Sign in again. Contact support if the problem persists.",
        "retry_allowed": False,
    },
    "TENANT_003": {
        "code": "TENANT_003",
        "message": "Administrative request did not name a tenant scope",
        "user_message": "Choose a tenant, or explicitly request all tenants.",
        "suggestion": "Pass tenant_id=<uuid> or all_tenants=true.",
        "retry_allowed": False,
    },
    "AUTH_001": {
        "code": "AUTH_001",
        "message": "Administrative key missing or invalid",
        "user_message": "You don't have permission to perform this action.",
        "suggestion": "Provide a valid administrative key.",
        "retry_allowed": False,
    },
    "CAT_001": {
        "code": "CAT_001",
        "message": "Unknown category id",
        "user_message": "That category isn't supported.",
        "suggestion": "Please choose a category from the category list.",
        "retry_allowed": False,
    },
    "CAT_002": {
        "code": "CAT_002",
        "message": "Unknown category group",
        "user_message": "We couldn't find that category group.",
        "suggestion": "Please choose a group from the category list.",
        "retry_allowed": False,
    },
    "CAT_003": {
        "code": "CAT_003",
        "message": "No categorization result",
        "user_message": "We couldn't categorize this merchant automatically.",
        "suggestion": "Please try again, or pick a category yourself.",
        "retry_allowed": True,
    },
    "CAT_004": {
        "code": "CAT_004",
        "message": "Classification backend unavailable or returned unusable content",
        "user_message": "Automatic categorization is unavailable right now.",
        "suggestion": "Please pick a category yourself, or try again later.",
        "retry_allowed": True,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request validation failed",
        "user_message": "Invalid input data",
        "suggestion": "Please check your input and try again",
        "retry_allowed": True,
    },
    "DB_001": {
        "code": "DB_001",
        "message": "Database operation failed",
        "user_message": "A database error occurred",
        "suggestion": "Please try again later",
        "retry_allowed": True,
    },
    "DB_002": {
        "code": "DB_002",
        "message": "Resource already exists",
        "user_message": "This record already exists",
        "suggestion": "Please check if the record was already created",
        "retry_allowed": False,
    },
    "API_001": {
        "code": "API_001",
        "message": "Transaction not found",
        "user_message": "We couldn't find this transaction.",
        "suggestion": "Please refresh and try again.",
        "retry_allowed": False,
    },
    "SYS_001": {
        "code": "SYS_001",
        "message": "Internal server error",
        "user_message": "An unexpected error occurred",
        "suggestion": "Please try again later or contact support",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Unknown codes resolve to a generic, retryable definition rather than
    raising.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    return get_error(error_code)["user_message"]


def get_suggestion(error_code: str) -> str:
    return get_error(error_code)["suggestion"]


def is_retryable(error_code: str) -> bool:
    return get_error(error_code)["retry_allowed"]


def error_body(error_code: str, message: str | None = None) -> dict:
    """Build the JSON error envelope returned by every endpoint.

    Args:
        error_code: Error code from the catalog
        message: Optional override for the technical message

    Returns:
        Dict with error_code, message, user_message, suggestion, retry_allowed
    """
    error_def = get_error(error_code)
    return {
        "error_code": error_code,
        "message": message or error_def["message"],
        "user_message": error_def["user_message"],
        "suggestion": error_def["suggestion"],
        "retry_allowed": error_def["retry_allowed"],
    }
