"""
Like service.
Keeps the user and property sides of the like relationship consistent.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.repositories.like import LikeRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository
from marketplace.models.user import User
from marketplace.utils.auth import ViewerContext
from marketplace.utils.locks import KeyedLockRegistry
from marketplace.utils.exceptions import NotFoundError, PropertyNotFoundError, UnauthorizedError
import uuid
import logging

logger = logging.getLogger(__name__)


class LikeService:
    """
    Toggles likes for a viewer.

    Both sides of the relationship are backed by one row in property_likes, so a
    single insert or delete changes them together. Operations on the same
    (user, property) pair are serialized through the shared lock registry.
    """

    def __init__(self, db_session: AsyncSession, locks: KeyedLockRegistry):
        self.db = db_session
        self.locks = locks
        self.like_repo = LikeRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def _check_pair(self, viewer: ViewerContext, property_id: uuid.UUID) -> None:
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None or not property_obj.is_visible_to(viewer.user_id, viewer.is_admin):
            raise PropertyNotFoundError()

        if await self.user_repo.get_by_id(viewer.user_id) is None:
            raise NotFoundError("User")

    async def toggle_like(self, viewer: ViewerContext, property_id: uuid.UUID) -> bool:
        """
        Flip the viewer's like on a property.

        Args:
            viewer: Authenticated viewer
            property_id: Property to like or unlike

        Returns:
            True if the property is now liked, False if it is now unliked

        Raises:
            PropertyNotFoundError: If the property doesn't exist or is hidden from the viewer
            StorageFailureError: If the write fails; nothing is changed then
        """
        if viewer.is_anonymous:
            raise UnauthorizedError()

        async with self.locks.hold((viewer.user_id, property_id)):
            await self._check_pair(viewer, property_id)
            if await self.like_repo.is_liked(viewer.user_id, property_id):
                await self.like_repo.remove(viewer.user_id, property_id)
                liked = False
            else:
                await self.like_repo.add(viewer.user_id, property_id)
                liked = True

        logger.info(f"User {viewer.user_id} {'liked' if liked else 'unliked'} property {property_id}")
        return liked

    async def set_like(self, viewer: ViewerContext, property_id: uuid.UUID, liked: bool) -> bool:
        """
        Idempotently set the viewer's like on a property.

        Service-level entry point for callers that know the state they want,
        such as imports and retried jobs. The HTTP route toggles instead.

        Returns:
            True if membership changed
        """
        if viewer.is_anonymous:
            raise UnauthorizedError()

        async with self.locks.hold((viewer.user_id, property_id)):
            await self._check_pair(viewer, property_id)
            if liked:
                changed = await self.like_repo.add(viewer.user_id, property_id)
            else:
                changed = await self.like_repo.remove(viewer.user_id, property_id)

        if changed:
            logger.info(f"User {viewer.user_id} set like={liked} on property {property_id}")
        return changed

    async def get_likers(self, property_id: uuid.UUID) -> List[User]:
        """
        Users who liked a property.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        if await self.property_repo.get_by_id(property_id) is None:
            raise PropertyNotFoundError()
        return await self.like_repo.get_likers(property_id)
