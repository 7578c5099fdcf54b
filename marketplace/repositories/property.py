"""
Property repository for listing storage and retrieval.
Visibility and filter predicates are built by the query builder and passed in.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.sql.elements import ColumnElement
from marketplace.repositories.base import BaseRepository
from marketplace.models.property import Property
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """Repository for property listings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new listing.

        Args:
            property_data: Column values including owner_id

        Returns:
            Created property with owner and likers loaded
        """
        created = await self.create(property_data)
        logger.info(f"Created property: {created.title} (ID: {created.id})")
        return await self.get_property_with_details(created.id)

    async def get_property_with_details(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get a property with owner and likers freshly loaded.

        Args:
            property_id: UUID of the property

        Returns:
            Property or None if not found
        """
        return await self.get_by_id(property_id)

    async def list_matching(self, predicate: ColumnElement) -> List[Property]:
        """
        All properties matching a predicate, newest first.

        Args:
            predicate: Combined visibility and filter expression

        Returns:
            List of properties with owner and likers loaded
        """
        query = (
            select(Property)
            .where(predicate)
            .order_by(Property.created_at.desc(), Property.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        properties = list(result.scalars().all())
        logger.debug(f"Listed {len(properties)} properties")
        return properties

    async def approve(self, property_obj: Property) -> Property:
        """Mark a listing approved so it becomes publicly visible."""
        updated = await self.update(property_obj, {"approved": True})
        logger.info(f"Approved property {updated.id}")
        return await self.get_property_with_details(updated.id)

    async def get_recent(self, limit: int = 5) -> List[Property]:
        query = (
            select(Property)
            .order_by(Property.created_at.desc(), Property.id)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
