"""Service for the catalogued Badge entities behind ``/badges``."""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from trustbadges.core.cache import BADGES_LIST_KEY, InMemoryCache
from trustbadges.core.errors import NotFoundError, PersistenceError, ValidationError
from trustbadges.repositories.unit_of_work import AbstractUnitOfWork
from trustbadges.schemas.badge import BadgeCreate, BadgeResponse, BadgeUpdate

logger = logging.getLogger(__name__)


class BadgeService:
    def __init__(self, uow: AbstractUnitOfWork, cache: InMemoryCache):
        self.uow = uow
        self.cache = cache

    async def list_active(self) -> List[BadgeResponse]:
        """Active badges, served from cache when possible."""
        cached = self.cache.get(BADGES_LIST_KEY)
        if cached is not None:
            return list(cached)

        badges = [BadgeResponse.model_validate(row) for row in await self.uow.badges.get_active()]
        self.cache.set(BADGES_LIST_KEY, tuple(badges))
        return badges

    async def create_badge(self, data: BadgeCreate) -> BadgeResponse:
        try:
            badge = await self.uow.badges.create_badge(name=data.name, settings=data.settings)
            response = BadgeResponse.model_validate(badge)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to create badge {data.name}: {e}")
            raise PersistenceError("Failed to create badge")

        self.cache.delete(BADGES_LIST_KEY)
        logger.info(f"Created badge {response.id} ({response.name})")
        return response

    async def update_badge(self, badge_id: int, data: BadgeUpdate) -> BadgeResponse:
        values = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if not values:
            raise ValidationError("No fields to update")

        try:
            badge = await self.uow.badges.update(badge_id, values)
            if badge is None:
                raise NotFoundError(f"Badge {badge_id} not found")
            response = BadgeResponse.model_validate(badge)
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to update badge {badge_id}: {e}")
            raise PersistenceError(f"Failed to update badge {badge_id}")

        self.cache.delete(BADGES_LIST_KEY)
        logger.info(f"Updated badge {badge_id}")
        return response

    async def delete_badge(self, badge_id: int) -> None:
        try:
            deleted = await self.uow.badges.delete(badge_id)
            if not deleted:
                raise NotFoundError(f"Badge {badge_id} not found")
            await self.uow.commit()
        except SQLAlchemyError as e:
            await self.uow.rollback()
            logger.error(f"Failed to delete badge {badge_id}: {e}")
            raise PersistenceError(f"Failed to delete badge {badge_id}")

        self.cache.delete(BADGES_LIST_KEY)
        logger.info(f"Deleted badge {badge_id}")
