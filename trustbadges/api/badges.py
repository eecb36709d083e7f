import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response

from trustbadges.core.config import settings
from trustbadges.core.rate_limiter import check_rate_limit
from trustbadges.core.service_dependencies import get_badge_service, require_admin_with_csrf
from trustbadges.models.user import User
from trustbadges.schemas.badge import BadgeCreate, BadgeResponse, BadgeUpdate
from trustbadges.services.badge_service import BadgeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/badges", tags=["badges"])


@router.get("", response_model=List[BadgeResponse])
async def list_badges(
    request: Request,
    response: Response,
    badge_service: BadgeService = Depends(get_badge_service),
):
    """
    Active badges. Public, limited per client IP.
    """
    await check_rate_limit(request, limit=settings.PUBLIC_RATE_LIMIT_PER_HOUR)

    rate_limit_info = request.state.rate_limit_info
    response.headers["X-RateLimit-Limit"] = str(rate_limit_info["limit"])
    response.headers["X-RateLimit-Remaining"] = str(rate_limit_info["remaining"])
    response.headers["X-RateLimit-Reset"] = str(rate_limit_info["reset"])

    return await badge_service.list_active()


@router.post("", response_model=BadgeResponse, status_code=201)
async def create_badge(
    data: BadgeCreate,
    user: User = Depends(require_admin_with_csrf),
    badge_service: BadgeService = Depends(get_badge_service),
):
    return await badge_service.create_badge(data)


@router.put("/{badge_id}", response_model=BadgeResponse)
async def update_badge(
    badge_id: int,
    data: BadgeUpdate,
    user: User = Depends(require_admin_with_csrf),
    badge_service: BadgeService = Depends(get_badge_service),
):
    return await badge_service.update_badge(badge_id, data)


@router.delete("/{badge_id}", status_code=204)
async def delete_badge(
    badge_id: int,
    user: User = Depends(require_admin_with_csrf),
    badge_service: BadgeService = Depends(get_badge_service),
):
    await badge_service.delete_badge(badge_id)
    return Response(status_code=204)
