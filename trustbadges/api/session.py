import logging

from fastapi import APIRouter, Depends, Request

from trustbadges.core.auth import create_session, logout_user
from trustbadges.core.service_dependencies import get_auth_service
from trustbadges.schemas.badge_group import MessageResponse
from trustbadges.schemas.user import LoginResponse, UserLogin
from trustbadges.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["session"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    credentials: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Start a session. The returned CSRF token must be sent back in the
    ``X-CSRF-Token`` header on every state-changing request.
    """
    user = await auth_service.authenticate(credentials.email, credentials.password)
    csrf_token = create_session(request, user.id, user.email)
    logger.info(f"User {user.email} logged in")
    return LoginResponse(email=user.email, is_admin=user.is_admin, csrf_token=csrf_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    logout_user(request)
    return MessageResponse(message="Logged out")
