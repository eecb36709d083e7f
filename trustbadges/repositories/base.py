from abc import ABC
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository class providing common CRUD operations.
    """

    primary_key = "id"

    def __init__(self, db: AsyncSession, model: Type[ModelType]):
        self.db = db
        self.model = model

    @property
    def _pk(self):
        return getattr(self.model, self.primary_key)

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get a single record by primary key."""
        result = await self.db.execute(select(self.model).filter(self._pk == id))
        return result.scalar_one_or_none()

    async def get_all(self) -> List[ModelType]:
        """Get all records in primary key order."""
        result = await self.db.execute(select(self.model).order_by(self._pk.asc()))
        return list(result.scalars().all())

    async def create(self, obj_data: Dict[str, Any]) -> ModelType:
        """Create a new record."""
        obj = self.model(**obj_data)
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, id: int, obj_data: Dict[str, Any]) -> Optional[ModelType]:
        """Update a record by primary key."""
        obj = await self.get_by_id(id)
        if obj is None:
            return None
        return await self.apply(obj, obj_data)

    async def apply(self, obj: ModelType, obj_data: Dict[str, Any]) -> ModelType:
        """Set attributes on a loaded record and flush them."""
        for field, value in obj_data.items():
            setattr(obj, field, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: int) -> bool:
        """Delete a record by primary key."""
        result = await self.db.execute(
            delete(self.model).filter(self._pk == id)
        )
        return result.rowcount > 0
