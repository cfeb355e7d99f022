"""Tenant scope guard.

Resolves the caller's tenant once per request and hands it on as an
explicit argument. Nothing below the API layer reads tenant identity
from ambient state.

Two interchangeable resolvers exist:
- HeaderTenantResolver reads an explicit tenant header (service-to-service,
  development).
- ClaimTenantResolver reads a tenant claim from a verified bearer token.

Which one is used is decided once, from settings, when the app is built.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from uuid import UUID

from jose import JWTError

from pocketbook.core.exceptions import AdminScopeError, TenantResolutionError
from pocketbook.core.security import decode_token, get_tenant_claim

logger = logging.getLogger(__name__)


def parse_tenant_id(raw: str | None, source: str) -> UUID:
    """Parse a raw tenant credential into a tenant id.

    Args:
        raw: Raw credential value
        source: Where the value came from (for logging)

    Returns:
        Tenant id

    Raises:
        TenantResolutionError: TENANT_001 if absent, TENANT_002 if unparsable
    """
    if raw is None or not raw.strip():
        logger.warning("Tenant credential missing", extra={"source": source})
        raise TenantResolutionError("TENANT_001", details={"source": source})
    try:
        return UUID(raw.strip())
    except ValueError:
        logger.warning("Malformed tenant credential", extra={"source": source})
        raise TenantResolutionError("TENANT_002", details={"source": source})


def require_tenant(tenant_id: Any) -> UUID:
    """Reject anything that is not an already-resolved tenant id."""
    if tenant_id is None:
        raise TenantResolutionError("TENANT_001", details={"source": "argument"})
    if not isinstance(tenant_id, UUID):
        raise TenantResolutionError("TENANT_002", details={"source": "argument"})
    return tenant_id


class HasHeaders(Protocol):
    headers: Mapping[str, str]


class TenantResolver(ABC):
    """Strategy for turning a request into a tenant id."""

    name: str = ""

    @abstractmethod
    def resolve(self, request: HasHeaders) -> UUID:
        """Resolve the tenant for a request or raise TenantResolutionError."""


class HeaderTenantResolver(TenantResolver):
    """Read the tenant id from an explicit request header."""

    name = "header"

    def __init__(self, header_name: str = "X-Tenant-Id"):
        self.header_name = header_name

    def resolve(self, request: HasHeaders) -> UUID:
        return parse_tenant_id(request.headers.get(self.header_name), source="header")


class ClaimTenantResolver(TenantResolver):
    """Read the tenant id from the claims of a verified bearer token."""

    name = "jwt"

    def resolve(self, request: HasHeaders) -> UUID:
        authorization = request.headers.get("Authorization") or ""
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            logger.warning("Bearer token missing", extra={"source": "jwt"})
            raise TenantResolutionError("TENANT_001", details={"source": "jwt"})

        try:
            payload = decode_token(token.strip())
        except JWTError:
            logger.warning("Bearer token failed verification", extra={"source": "jwt"})
            raise TenantResolutionError("TENANT_002", details={"source": "jwt"})

        try:
            claim = get_tenant_claim(payload)
        except JWTError:
            raise TenantResolutionError("TENANT_001", details={"source": "jwt"})
        return parse_tenant_id(claim, source="jwt")


def build_tenant_resolver(provider: str, header_name: str = "X-Tenant-Id") -> TenantResolver:
    """Select the resolver named by configuration.

    Raises:
        ValueError: If the provider name is unknown
    """
    provider = provider.strip().lower()
    if provider == "header":
        return HeaderTenantResolver(header_name)
    if provider == "jwt":
        return ClaimTenantResolver()
    raise ValueError(f"Unknown tenant provider: {provider}")


@dataclass(frozen=True)
class TenantScope:
    """Query scope: exactly one tenant, or an explicit request for all tenants.

    There is no unscoped value.
    """

    tenant_id: UUID | None = None
    all_tenants: bool = False

    def __post_init__(self) -> None:
        if self.all_tenants and self.tenant_id is not None:
            raise AdminScopeError(details={"reason": "both tenant and all_tenants given"})
        if not self.all_tenants:
            require_tenant(self.tenant_id)

    @classmethod
    def for_tenant(cls, tenant_id: UUID) -> "TenantScope":
        return cls(tenant_id=tenant_id)

    @classmethod
    def across_all_tenants(cls) -> "TenantScope":
        return cls(all_tenants=True)


def admin_scope(tenant_id: str | None, all_tenants: bool) -> TenantScope:
    """Build the scope for an administrative request.

    Args:
        tenant_id: Raw tenant id named by the caller, if any
        all_tenants: Whether the caller explicitly asked for every tenant

    Returns:
        A TenantScope

    Raises:
        AdminScopeError: If neither or both were given
        TenantResolutionError: If tenant_id is not a valid id
    """
    if all_tenants and tenant_id:
        raise AdminScopeError(details={"reason": "both tenant and all_tenants given"})
    if all_tenants:
        return TenantScope.across_all_tenants()
    if not tenant_id:
        raise AdminScopeError(details={"reason": "no scope named"})
    return TenantScope.for_tenant(parse_tenant_id(tenant_id, source="admin"))
