"""
Repository layer for data access operations.
"""

from marketplace.repositories.base import BaseRepository
from marketplace.repositories.like import LikeRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "LikeRepository",
    "PropertyRepository",
    "UserRepository"
]
