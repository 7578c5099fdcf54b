"""
Pydantic schemas for request/response validation.
"""

from .base import CamelModel, MessageResponse

# Authentication schemas
from .auth import AuthResponse, LoginRequest, RegisterRequest

# User schemas
from .user import AdminUserListResponse, UserResponse, UserSummary, UserUpdate

# Property schemas
from .property import (
    AdminPropertyListResponse,
    Coordinates,
    DashboardResponse,
    LikeToggleResponse,
    Location,
    PropertyCreate,
    PropertyLikesResponse,
    PropertyResponse,
    PropertyUpdate
)

__all__ = [
    "CamelModel",
    "MessageResponse",

    # Authentication
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",

    # User
    "AdminUserListResponse",
    "UserResponse",
    "UserSummary",
    "UserUpdate",

    # Property
    "AdminPropertyListResponse",
    "Coordinates",
    "DashboardResponse",
    "LikeToggleResponse",
    "Location",
    "PropertyCreate",
    "PropertyLikesResponse",
    "PropertyResponse",
    "PropertyUpdate"
]
