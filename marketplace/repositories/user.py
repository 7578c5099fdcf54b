"""
User repository for account and profile operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from marketplace.repositories.base import BaseRepository
from marketplace.models.user import User, UserRole
from marketplace.models.property import Property
from marketplace.models.like import PropertyLike
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management.
    Passwords arrive here already hashed; the credential service owns hashing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user.

        Args:
            user_data: Field values including a normalized email and hashed_password

        Returns:
            Created user instance
        """
        create_data = {**user_data, "role": user_data.get("role") or UserRole.USER}
        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for, compared case-insensitively

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_user_id: Optional[uuid.UUID] = None) -> bool:
        """Check whether another account already uses this email."""
        query = select(func.count(User.id)).where(User.email == email.lower().strip())
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def get_liked_properties(self, user_id: uuid.UUID) -> List[Property]:
        """
        Properties the user liked, newest listing first.
        Read straight from the like table so the result reflects committed toggles.
        """
        query = (
            select(Property)
            .join(PropertyLike, PropertyLike.property_id == Property.id)
            .where(PropertyLike.user_id == user_id)
            .order_by(Property.created_at.desc(), Property.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_recent(self, limit: int = 5) -> List[User]:
        query = select(User).order_by(User.created_at.desc(), User.id).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
