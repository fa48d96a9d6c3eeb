"""
FastAPI Dependencies
Authentication and permission checks for organization-scoped routes
Source: https://fastapi.tiangolo.com/tutorial/dependencies/
"""

import logging
from typing import Callable
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from claimflow.api.config import get_settings
from claimflow.schemas.auth import CLAIM_PERMISSIONS, PermissionDenied, TokenClaims
from claimflow.utils.errors import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)

# Fixed identities for X-Dev-User mock authentication
DEV_ORG_UUID = "00000000-0000-0000-0000-000000000001"
DEV_USER_UUID = "00000000-0000-0000-0000-000000000002"


def decode_token(token: str) -> TokenClaims:
    """
    Decode and validate a JWT access token.

    Raises:
        AuthenticationError: token expired, invalid, or missing required claims
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    if not payload.get("sub") or not payload.get("org_id"):
        raise AuthenticationError("Token is missing sub or org_id")

    try:
        UUID(str(payload["org_id"]))
    except ValueError:
        raise AuthenticationError("Token org_id is not a valid UUID")

    return TokenClaims(
        sub=str(payload["sub"]),
        org_id=str(payload["org_id"]),
        roles=payload.get("roles", []),
        permissions=payload.get("permissions", []),
        exp=payload.get("exp", 0),
        iat=payload.get("iat", 0),
    )


async def get_token_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    """
    Dependency to get and validate token claims.

    In development mode, accepts X-Dev-User header for mock authentication.
    """
    settings = get_settings()

    if settings.is_development:
        dev_user = request.headers.get("X-Dev-User")
        if dev_user:
            logger.debug(f"Development mode: Using mock auth for user '{dev_user}'")
            return TokenClaims(
                sub=DEV_USER_UUID,
                org_id=DEV_ORG_UUID,
                roles=["administrator"],
                permissions=list(CLAIM_PERMISSIONS),
                exp=9999999999,
                iat=0,
            )

    if not credentials:
        raise AuthenticationError("Authentication required")

    return decode_token(credentials.credentials)


def require_permission(permission: str) -> Callable:
    """
    Dependency factory to require a specific permission.

    Usage:
        @router.get("/")
        async def list_claims(claims: TokenClaims = Depends(require_permission("claims:read"))):
            ...
    """

    async def permission_checker(
        claims: TokenClaims = Depends(get_token_claims),
    ) -> TokenClaims:
        if permission not in claims.permissions:
            logger.warning(f"User {claims.sub} denied: {permission} required")
            raise PermissionDeniedError(
                detail=PermissionDenied(
                    detail=f"Permission denied: {permission} required",
                    required_permissions=[permission],
                    user_permissions=claims.permissions,
                ).model_dump(),
            )
        return claims

    return permission_checker
