from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trustbadges.models.user import User
from trustbadges.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        result = await self.db.execute(
            select(User).filter(User.email == email)
        )
        return result.scalar_one_or_none()

    async def create_user(self, email: str, hashed_password: str, is_admin: bool = False) -> User:
        """Create a new active user."""
        return await self.create({
            "email": email,
            "hashed_password": hashed_password,
            "is_active": True,
            "is_admin": is_admin,
        })
