"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, delete, func, and_
from marketplace.database import Base
from marketplace.utils.pagination import Page, PageParams
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Sequence
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Failed writes are rolled back and re-raised for the global error handlers.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID, options: Sequence[Any] = ()) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: UUID of the record to retrieve
            options: Loader options applied to the query

        Returns:
            Model instance if found, None otherwise
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .options(*options)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")
        return obj

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Apply field values to a loaded record and persist them.

        Args:
            db_obj: Loaded model instance
            obj_in: Dictionary of field values to set

        Returns:
            Updated model instance
        """
        try:
            for field, value in obj_in.items():
                setattr(db_obj, field, value)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def delete(self, id: uuid.UUID) -> bool:
        """
        Delete a record by its ID.

        Returns:
            True if record was deleted, False if not found
        """
        try:
            stmt = delete(self.model).where(self.model.id == id)
            result = await self.db.execute(stmt)
            await self.db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return deleted
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

    async def count(self, conditions: Sequence[Any] = ()) -> int:
        """
        Count records matching all conditions.

        Args:
            conditions: SQLAlchemy boolean expressions AND-ed together

        Returns:
            Number of matching records
        """
        query = select(func.count(self.model.id))
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_page(
        self,
        params: PageParams,
        conditions: Sequence[Any] = (),
        options: Sequence[Any] = ()
    ) -> Page[ModelType]:
        """
        Get one page of records, newest first.

        Args:
            params: Page number and size
            conditions: SQLAlchemy boolean expressions AND-ed together
            options: Loader options applied to the item query

        Returns:
            Page with the slice, the total and the page arithmetic
        """
        total = await self.count(conditions)

        query = select(self.model).options(*options)
        if conditions:
            query = query.where(and_(*conditions))
        query = (
            query.order_by(self.model.created_at.desc(), self.model.id)
            .offset(params.skip)
            .limit(params.limit)
            .execution_options(populate_existing=True)
        )

        result = await self.db.execute(query)
        items: List[ModelType] = list(result.scalars().all())

        logger.debug(
            f"Retrieved page {params.page} of {self.model.__name__}: {len(items)} of {total}"
        )
        return Page(items, total, params)
