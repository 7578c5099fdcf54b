"""
Pydantic schemas for authentication requests and responses.
"""

from pydantic import EmailStr, Field, field_validator
from typing import Optional
from marketplace.models.user import UserRole
from marketplace.schemas.base import CamelModel
from marketplace.schemas.user import UserResponse


class RegisterRequest(CamelModel):
    """Self-registration request."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Jane Doe"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)",
        examples=["securepassword123"]
    )
    role: UserRole = Field(UserRole.USER, description="user or owner")
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthResponse(CamelModel):
    """Issued token together with the authenticated user."""

    token: str = Field(..., description="JWT access token")
    user: UserResponse
