"""JWT helpers for claim-based tenant resolution."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from pocketbook.config import settings

ACCESS_TOKEN_EXPIRE_MINUTES = 30

# Claims checked, in order, for the tenant identifier
TENANT_CLAIMS = ("tenant_id", "tid")


def create_access_token(
    tenant_id: UUID,
    subject: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token carrying a tenant claim.

    Args:
        tenant_id: Tenant to encode in the token
        subject: Optional subject (user) identifier
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    expire = datetime.now(timezone.utc) + expires_delta
    to_encode: dict[str, Any] = {
        "tenant_id": str(tenant_id),
        "exp": expire,
        "type": "access",
    }
    if subject is not None:
        to_encode["sub"] = subject
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        JWTError: If token is invalid or expired
    """
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def get_tenant_claim(payload: dict[str, Any]) -> str:
    """
    Extract the raw tenant claim from a decoded token payload.

    Args:
        payload: Decoded JWT payload

    Returns:
        The tenant claim value as a string

    Raises:
        JWTError: If no tenant claim is present
    """
    for claim in TENANT_CLAIMS:
        value = payload.get(claim)
        if value:
            return str(value)
    raise JWTError("Token missing tenant claim")
