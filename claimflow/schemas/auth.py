"""
Authentication Schemas
JWT claims issued by the identity provider and permission error payloads.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

# Permission codes checked by the claims API
CLAIM_PERMISSIONS = [
    "claims:create",
    "claims:read",
    "claims:update",
    "claims:delete",
    "payments:create",
    "supplements:create",
    "supplements:update",
]


class TokenClaims(BaseModel):
    """JWT token claims with organization and RBAC info."""

    sub: str  # User ID
    org_id: str
    roles: list[str] = Field(default_factory=list)
    permissions: list[str] = Field(default_factory=list)
    exp: int = 0
    iat: int = 0

    @property
    def user_uuid(self) -> Optional[UUID]:
        try:
            return UUID(self.sub)
        except (ValueError, TypeError):
            return None

    @property
    def org_uuid(self) -> UUID:
        return UUID(self.org_id)


class PermissionDenied(BaseModel):
    """Schema for permission denied response."""

    detail: str = "Permission denied"
    required_permissions: list[str]
    user_permissions: list[str]
