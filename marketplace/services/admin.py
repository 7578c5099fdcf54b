"""
Admin service for moderation and overview screens.
Callers are already authorized as admins by the access gate.
"""

from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository
from marketplace.models.property import Property
from marketplace.models.user import User
from marketplace.utils.pagination import Page, PageParams, admin_property_conditions, admin_user_conditions
from marketplace.utils.exceptions import PropertyNotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


class AdminService:
    """Searches, approvals, rejections and dashboard totals."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def search_properties(self, params: PageParams, search: Any = None, status: Any = None) -> Page[Property]:
        """
        One page of all properties, approved or not.

        Raises:
            InvalidFilterError: If status is not approved or pending
        """
        conditions = admin_property_conditions(search, status)
        return await self.property_repo.get_page(params, conditions)

    async def search_users(self, params: PageParams, search: Any = None, role: Any = None) -> Page[User]:
        """
        One page of users.

        Raises:
            InvalidFilterError: If role is not a known role
        """
        conditions = admin_user_conditions(search, role)
        return await self.user_repo.get_page(params, conditions)

    async def approve_property(self, property_id: uuid.UUID, admin_id: uuid.UUID) -> Property:
        """
        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError()

        approved = await self.property_repo.approve(property_obj)
        logger.info(f"Admin {admin_id} approved property {property_id}")
        return approved

    async def reject_property(self, property_id: uuid.UUID, admin_id: uuid.UUID) -> None:
        """
        Reject a listing by deleting it. Its likes go with it.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        deleted = await self.property_repo.delete(property_id)
        if not deleted:
            raise PropertyNotFoundError()
        logger.info(f"Admin {admin_id} rejected and deleted property {property_id}")

    async def dashboard(self) -> Dict[str, Any]:
        """Totals plus the most recent properties and users."""
        return {
            "total_users": await self.user_repo.count(),
            "total_properties": await self.property_repo.count(),
            "approved_properties": await self.property_repo.count([Property.approved.is_(True)]),
            "pending_properties": await self.property_repo.count([Property.approved.is_(False)]),
            "recent_properties": await self.property_repo.get_recent(RECENT_ACTIVITY_LIMIT),
            "recent_users": await self.user_repo.get_recent(RECENT_ACTIVITY_LIMIT),
        }
