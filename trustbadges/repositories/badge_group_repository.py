from typing import Any, Dict, List, Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from trustbadges.models.badge_group import BadgeGroup
from trustbadges.repositories.base import BaseRepository


class BadgeGroupRepository(BaseRepository[BadgeGroup]):
    """Repository for BadgeGroup rows, addressed by their string group id."""

    primary_key = "pk"

    def __init__(self, db: AsyncSession):
        super().__init__(db, BadgeGroup)

    async def get_by_group_id(self, group_id: str) -> Optional[BadgeGroup]:
        result = await self.db.execute(
            select(BadgeGroup).filter(BadgeGroup.group_id == group_id)
        )
        return result.scalar_one_or_none()

    async def group_exists(self, group_id: str) -> bool:
        result = await self.db.execute(
            select(BadgeGroup.pk).filter(BadgeGroup.group_id == group_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_groups(self) -> List[BadgeGroup]:
        """All groups in insertion order."""
        return await self.get_all()

    async def list_custom_group_ids(self) -> List[str]:
        result = await self.db.execute(
            select(BadgeGroup.group_id).filter(BadgeGroup.is_default == False)  # noqa: E712
        )
        return list(result.scalars().all())

    async def create_group(
        self,
        group_id: str,
        name: str,
        settings: Dict[str, Any],
        is_active: bool = True,
        is_default: bool = False,
        required_plugin: Optional[str] = None,
    ) -> BadgeGroup:
        return await self.create({
            "group_id": group_id,
            "group_name": name,
            "settings": settings,
            "is_active": is_active,
            "is_default": is_default,
            "required_plugin": required_plugin,
        })

    async def update_group(self, group_id: str, values: Dict[str, Any]) -> Optional[BadgeGroup]:
        group = await self.get_by_group_id(group_id)
        if group is None:
            return None
        return await self.apply(group, values)

    async def delete_group(self, group_id: str) -> bool:
        result = await self.db.execute(
            delete(BadgeGroup).filter(BadgeGroup.group_id == group_id)
        )
        return result.rowcount > 0
