"""
API route handlers for the Property Marketplace API.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .properties import router as properties_router
from .users import router as users_router

__all__ = ["admin_router", "auth_router", "properties_router", "users_router"]
