"""Base repository with common operations.

Provides a generic async repository pattern for SQLAlchemy models.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from community_rewards.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository with common operations.

    - get_by_id: Retrieve single record by primary key
    - lock_and_load: Retrieve and row-lock a record (inside a transaction)
    - create: Insert new record
    - count: Count records matching criteria

    Example:
        repo = RewardRepository(session)
        reward = await repo.lock_and_load(reward_id)
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with async session.

        @param session - SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, id: Any) -> ModelType | None:
        """Get record by primary key.

        @param id - Primary key value
        @returns Model instance or None if not found
        """
        return await self.session.get(self.model, id)

    async def lock_and_load(self, id: Any) -> ModelType | None:
        """Load a record with SELECT ... FOR UPDATE.

        Only meaningful inside an open transaction; the lock is held until
        that transaction commits or rolls back.

        @param id - Primary key value
        @returns Locked model instance or None if not found
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(self, obj_in: dict[str, Any] | ModelType) -> ModelType:
        """Create new record.

        @param obj_in - Dictionary or model instance with data
        @returns Created model instance (flushed, primary key assigned)
        """
        if isinstance(obj_in, dict):
            db_obj = self.model(**obj_in)
        else:
            db_obj = obj_in
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def count(self, **filters: Any) -> int:
        """Count records matching criteria.

        @param filters - Key-value pairs for filtering
        @returns Number of matching records
        """
        stmt = select(func.count()).select_from(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key) and value is not None:
                stmt = stmt.where(getattr(self.model, key) == value)
        result = await self.session.execute(stmt)
        return result.scalar() or 0
