"""
Service layer for business logic implementation.
Contains services for accounts, listings, likes, moderation and error handling.
"""

from .admin import AdminService
from .auth import AuthService
from .error_handler import ErrorHandlerService
from .like import LikeService
from .presenter import PropertyPresenter
from .property import PropertyService

__all__ = [
    "AdminService",
    "AuthService",
    "ErrorHandlerService",
    "LikeService",
    "PropertyPresenter",
    "PropertyService"
]
