"""
Pydantic schemas for user profiles.
Responses never include the password hash.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
import uuid
from marketplace.models.user import UserRole
from marketplace.schemas.base import CamelModel


class UserSummary(CamelModel):
    """Minimal public view of a user, used for owners and likers."""

    id: uuid.UUID
    name: str
    email: str


class UserResponse(CamelModel):
    """User profile response (excluding sensitive data)."""

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    address: Optional[str] = None
    profile_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserUpdate(CamelModel):
    """Profile update. Only fields that are sent are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=255, examples=["Jane Doe"])
    email: Optional[EmailStr] = Field(None, examples=["jane@example.com"])
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    profile_image: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip() if v else v


class AdminUserListResponse(CamelModel):
    """Paginated user search result for the admin screens."""

    users: List[UserResponse]
    total_pages: int
    current_page: int
    total: int
