from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from trustbadges.core.cache import get_settings_cache
from trustbadges.core.config import settings
from trustbadges.core.database import get_db
from trustbadges.models.user import User
from trustbadges.repositories.unit_of_work import SqlAlchemyUnitOfWork
from trustbadges.services.auth_service import AuthService
from trustbadges.services.badge_renderer import BadgeRenderer
from trustbadges.services.badge_service import BadgeService
from trustbadges.services.position_resolver import PositionResolver
from trustbadges.services.settings_store import SettingsStore


@lru_cache
def get_badge_renderer() -> BadgeRenderer:
    """Renderer shared across requests; it holds no per-request state."""
    return BadgeRenderer(asset_base_url=settings.BADGE_ASSET_BASE_URL)


async def get_settings_store(db: AsyncSession = Depends(get_db)) -> SettingsStore:
    """Dependency to provide SettingsStore."""
    uow = SqlAlchemyUnitOfWork(db)
    return SettingsStore(uow, get_settings_cache())


async def get_badge_service(db: AsyncSession = Depends(get_db)) -> BadgeService:
    """Dependency to provide BadgeService."""
    uow = SqlAlchemyUnitOfWork(db)
    return BadgeService(uow, get_settings_cache())


async def get_position_resolver(
    store: SettingsStore = Depends(get_settings_store),
) -> PositionResolver:
    """Dependency to provide PositionResolver."""
    return PositionResolver(store, get_badge_renderer(), settings.INSTALLED_PLUGINS)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Dependency to provide AuthService."""
    uow = SqlAlchemyUnitOfWork(db)
    return AuthService(uow)


async def require_admin(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Dependency for admin-only reads."""
    return await auth_service.require_admin(request)


async def require_admin_with_csrf(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Dependency for admin-only writes."""
    return await auth_service.require_admin_with_csrf(request)
