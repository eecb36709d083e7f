from abc import ABC, abstractmethod
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from trustbadges.repositories.user_repository import UserRepository
from trustbadges.repositories.badge_group_repository import BadgeGroupRepository
from trustbadges.repositories.badge_repository import BadgeRepository

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern for managing database transactions."""

    users: UserRepository
    badge_groups: BadgeGroupRepository
    badges: BadgeRepository

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            await self.rollback()
        else:
            await self.commit()

    @abstractmethod
    async def commit(self):
        raise NotImplementedError

    @abstractmethod
    async def rollback(self):
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(self.session)
        self.badge_groups = BadgeGroupRepository(self.session)
        self.badges = BadgeRepository(self.session)

    async def commit(self):
        """Commit the current transaction."""
        try:
            await self.session.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            logger.error(f"Error committing transaction: {e}")
            await self.rollback()
            raise

    async def rollback(self):
        """Rollback the current transaction."""
        try:
            await self.session.rollback()
            logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Error rolling back transaction: {e}")
            raise
