"""
Like repository.
Sole writer of the property_likes table, which backs both sides of the like relationship.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import select, delete, func, and_
from marketplace.repositories.base import BaseRepository
from marketplace.models.like import PropertyLike
from marketplace.models.property import Property
from marketplace.models.user import User
from marketplace.utils.exceptions import NotFoundError, PropertyNotFoundError, StorageFailureError
from typing import List, Set
import uuid
import logging

logger = logging.getLogger(__name__)


class LikeRepository(BaseRepository[PropertyLike]):
    """Repository for (user, property) like pairs."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyLike, db)

    @staticmethod
    def _pair(user_id: uuid.UUID, property_id: uuid.UUID):
        return and_(PropertyLike.user_id == user_id, PropertyLike.property_id == property_id)

    async def _exists(self, model, row_id: uuid.UUID) -> bool:
        result = await self.db.execute(select(model.id).where(model.id == row_id))
        return result.scalar() is not None

    async def is_liked(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """Check membership of the pair."""
        result = await self.db.execute(
            select(func.count(PropertyLike.id)).where(self._pair(user_id, property_id))
        )
        return (result.scalar() or 0) > 0

    async def add(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Insert the pair with set semantics.

        Returns:
            True if a row was inserted, False if the pair already existed

        Raises:
            PropertyNotFoundError: If the property no longer exists
            NotFoundError: If the user no longer exists
            StorageFailureError: If the write fails for any other reason
        """
        try:
            self.db.add(PropertyLike(user_id=user_id, property_id=property_id))
            await self.db.commit()
            return True
        except IntegrityError:
            await self.db.rollback()
            if await self.is_liked(user_id, property_id):
                logger.debug(f"Like already present for user {user_id} on property {property_id}")
                return False
            if not await self._exists(Property, property_id):
                raise PropertyNotFoundError()
            if not await self._exists(User, user_id):
                raise NotFoundError("User")
            logger.error(f"Integrity failure adding like for user {user_id} on property {property_id}")
            raise StorageFailureError()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to add like for user {user_id} on property {property_id}: {e}")
            raise StorageFailureError()

    async def remove(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Delete the pair.

        Returns:
            True if a row was removed, False if the pair was absent

        Raises:
            StorageFailureError: If the write fails
        """
        try:
            result = await self.db.execute(delete(PropertyLike).where(self._pair(user_id, property_id)))
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to remove like for user {user_id} on property {property_id}: {e}")
            raise StorageFailureError()

    async def get_likers(self, property_id: uuid.UUID) -> List[User]:
        """Users who liked a property, in the order they liked it."""
        query = (
            select(User)
            .join(PropertyLike, PropertyLike.user_id == User.id)
            .where(PropertyLike.property_id == property_id)
            .order_by(PropertyLike.created_at, User.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_liker_ids(self, property_id: uuid.UUID) -> Set[uuid.UUID]:
        result = await self.db.execute(
            select(PropertyLike.user_id).where(PropertyLike.property_id == property_id)
        )
        return set(result.scalars().all())

    async def get_liked_property_ids(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        result = await self.db.execute(
            select(PropertyLike.property_id).where(PropertyLike.user_id == user_id)
        )
        return set(result.scalars().all())

    async def count_for_pair(self, user_id: uuid.UUID, property_id: uuid.UUID) -> int:
        """Number of rows stored for one pair. Never more than one."""
        result = await self.db.execute(
            select(func.count(PropertyLike.id)).where(self._pair(user_id, property_id))
        )
        return result.scalar() or 0
