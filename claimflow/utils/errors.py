"""
HTTP Errors for the Claims API
Route handlers raise these after translating claims service exceptions
Source: https://fastapi.tiangolo.com/tutorial/handling-errors/
"""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Bearer token missing, expired, or without sub/org_id (401)"""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(HTTPException):
    """
    Token lacks the permission a claims route requires (403).

    The detail is usually a serialized PermissionDenied payload listing the
    required and granted permissions.
    """

    def __init__(self, detail: str | dict = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFoundError(HTTPException):
    """Claim or supplement absent from the caller's organization (404)"""

    def __init__(self, detail: str = "Claim not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class ValidationError(HTTPException):
    """Claim rule rejected the request, e.g. a write to an archived claim (422)"""

    def __init__(self, detail: str = "Invalid claim data"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class ConflictError(HTTPException):
    """Claim state forbids the change: invalid stage transition or blocked archive (409)"""

    def __init__(self, detail: str = "Claim state conflict"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class InternalServerError(HTTPException):
    """Unexpected failure; the cause is logged, never returned to the client (500)"""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )
