"""
Database models for the Property Marketplace API.
Includes User, Property and the PropertyLike relationship table.
"""

from marketplace.models.user import User, UserRole
from marketplace.models.property import Property, DEFAULT_PROPERTY_STATUS
from marketplace.models.like import PropertyLike

__all__ = [
    "User",
    "UserRole",
    "Property",
    "DEFAULT_PROPERTY_STATUS",
    "PropertyLike",
]
