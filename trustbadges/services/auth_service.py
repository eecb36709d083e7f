from typing import Optional
import logging
from fastapi import Request

from trustbadges.core.auth import get_current_user_id, is_authenticated, verify_csrf, verify_password
from trustbadges.core.errors import AuthError
from trustbadges.models.user import User
from trustbadges.repositories.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication-related business logic."""

    def __init__(self, uow: AbstractUnitOfWork):
        self.uow = uow

    async def authenticate(self, email: str, password: str) -> User:
        """Return the active user matching the credentials."""
        user = await self.uow.users.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.info(f"Failed login attempt for {email}")
            raise AuthError("Invalid email or password")

        if not user.is_active:
            raise AuthError("User account is deactivated")

        return user

    async def get_current_user_if_authenticated(self, request: Request) -> Optional[User]:
        """Return the session user, or None if nobody is logged in."""
        if not is_authenticated(request):
            return None

        user_id = get_current_user_id(request)
        if not user_id:
            return None

        return await self.uow.users.get_by_id(user_id)

    async def get_current_user(self, request: Request) -> User:
        """Get the active session user or raise."""
        user = await self.get_current_user_if_authenticated(request)
        if not user:
            raise AuthError("Authentication required")

        if not user.is_active:
            raise AuthError("User account is deactivated")

        return user

    async def require_admin(self, request: Request) -> User:
        """Require an authenticated user with the administrative capability."""
        user = await self.get_current_user(request)

        if not user.is_admin:
            raise AuthError("Admin access required", status_code=403)

        return user

    async def require_admin_with_csrf(self, request: Request) -> User:
        """Admin check plus a matching CSRF header, for state-changing requests."""
        user = await self.require_admin(request)
        verify_csrf(request)
        return user
