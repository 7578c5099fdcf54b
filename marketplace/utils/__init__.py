"""
Utility modules for the Property Marketplace API.
"""

from .auth import (
    CredentialService,
    TokenPayload,
    ViewerContext,
    extract_token_from_header
)

from .exceptions import (
    APIException,
    ValidationError,
    InvalidFilterError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    StorageFailureError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InsufficientPermissionsError,
    PropertyNotFoundError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "CredentialService",
    "TokenPayload",
    "ViewerContext",
    "extract_token_from_header",

    # Exceptions
    "APIException",
    "ValidationError",
    "InvalidFilterError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "StorageFailureError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
    "PropertyNotFoundError",
]
