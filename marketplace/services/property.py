"""
Property service for managing listings.
Handles creation, visibility-scoped reads, owner updates and image uploads.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository
from marketplace.models.property import Property, DEFAULT_PROPERTY_STATUS
from marketplace.models.user import UserRole
from marketplace.schemas.property import PropertyCreate, PropertyUpdate
from marketplace.utils.auth import ViewerContext
from marketplace.utils.file_utils import AssetStore
from marketplace.utils.query_builder import PropertyFilters, PropertyQueryBuilder
from marketplace.utils.exceptions import (
    InsufficientPermissionsError,
    NotFoundError,
    PropertyNotFoundError,
    UnauthorizedError
)
import uuid
import logging

logger = logging.getLogger(__name__)

LISTING_ROLES = (UserRole.OWNER, UserRole.ADMIN)


class PropertyService:
    """
    Listing operations on behalf of one viewer.
    Every read applies the viewer's visibility scope.
    """

    def __init__(self, db_session: AsyncSession, asset_store: AssetStore):
        self.db = db_session
        self.asset_store = asset_store
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def create_property(self, property_data: PropertyCreate, viewer: ViewerContext) -> Property:
        """
        Create a new, unapproved listing owned by the viewer.

        Raises:
            UnauthorizedError: If the viewer is anonymous
            InsufficientPermissionsError: If the viewer is neither owner nor admin
            NotFoundError: If the viewer's account no longer exists
        """
        if viewer.is_anonymous:
            raise UnauthorizedError()
        if viewer.role not in LISTING_ROLES:
            raise InsufficientPermissionsError("create properties")

        if await self.user_repo.get_by_id(viewer.user_id) is None:
            raise NotFoundError("User")

        create_data = property_data.to_columns()
        create_data.update({
            "owner_id": viewer.user_id,
            "approved": False,
            "status": DEFAULT_PROPERTY_STATUS,
        })

        property_obj = await self.property_repo.create_property(create_data)
        logger.info(f"Property created by user {viewer.user_id}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def get_property(self, property_id: uuid.UUID, viewer: ViewerContext) -> Property:
        """
        Get one property the viewer may see.

        Raises:
            PropertyNotFoundError: If it doesn't exist or is hidden from the viewer
        """
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if property_obj is None or not property_obj.is_visible_to(viewer.user_id, viewer.is_admin):
            raise PropertyNotFoundError()
        return property_obj

    async def list_properties(self, filters: PropertyFilters, viewer: ViewerContext) -> List[Property]:
        """
        List properties matching the filters within the viewer's visibility scope.

        Args:
            filters: Parsed listing filters
            viewer: Current viewer

        Returns:
            Matching properties, newest first
        """
        predicate = PropertyQueryBuilder.build(filters, viewer)
        return await self.property_repo.list_matching(predicate)

    async def _get_manageable(self, property_id: uuid.UUID, viewer: ViewerContext, action: str) -> Property:
        property_obj = await self.get_property(property_id, viewer)
        if not viewer.can_manage(property_obj.owner_id):
            logger.warning(f"User {viewer.user_id} denied to {action} property {property_id}")
            raise InsufficientPermissionsError(action)
        return property_obj

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        viewer: ViewerContext
    ) -> Property:
        """
        Update listing content. Only the owner or an admin may do this.

        Raises:
            PropertyNotFoundError: If it doesn't exist or is hidden from the viewer
            InsufficientPermissionsError: If the viewer doesn't manage the listing
        """
        property_obj = await self._get_manageable(property_id, viewer, "update this property")

        changes = property_data.to_columns()
        if not changes:
            return property_obj

        await self.property_repo.update(property_obj, changes)
        logger.info(f"Property {property_id} updated by user {viewer.user_id}")
        return await self.property_repo.get_property_with_details(property_id)

    async def add_images(
        self,
        property_id: uuid.UUID,
        files: List[UploadFile],
        viewer: ViewerContext
    ) -> Property:
        """
        Store uploaded images and append them to the listing.

        Raises:
            PropertyNotFoundError: If it doesn't exist or is hidden from the viewer
            InsufficientPermissionsError: If the viewer doesn't manage the listing
            FileUploadError: If any file is rejected; nothing is stored then
        """
        property_obj = await self._get_manageable(property_id, viewer, "upload images for this property")

        stored = await self.asset_store.save_many(files)
        try:
            await self.property_repo.update(property_obj, {"images": list(property_obj.images or []) + stored})
        except Exception:
            for path in stored:
                self.asset_store.delete_stored(path)
            raise

        logger.info(f"Added {len(stored)} images to property {property_id}")
        return await self.property_repo.get_property_with_details(property_id)

    async def get_liked_properties(self, viewer: ViewerContext) -> List[Property]:
        """Properties the viewer liked, newest first."""
        if viewer.is_anonymous:
            raise UnauthorizedError()
        return await self.user_repo.get_liked_properties(viewer.user_id)
