from typing import Any, Dict, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trustbadges.models.badge import Badge
from trustbadges.repositories.base import BaseRepository


class BadgeRepository(BaseRepository[Badge]):
    """Repository for catalogued Badge entities."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Badge)

    async def get_active(self) -> List[Badge]:
        result = await self.db.execute(
            select(Badge).filter(Badge.is_active == True).order_by(Badge.id.asc())  # noqa: E712
        )
        return list(result.scalars().all())

    async def create_badge(self, name: str, settings: Dict[str, Any]) -> Badge:
        return await self.create({
            "name": name,
            "settings": settings,
            "is_active": True,
        })
