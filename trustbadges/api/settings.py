import logging
from typing import Dict, List

from fastapi import APIRouter, Depends

from trustbadges.core.config import settings
from trustbadges.core.service_dependencies import (
    get_settings_store,
    require_admin,
    require_admin_with_csrf,
)
from trustbadges.models.user import User
from trustbadges.schemas.badge_group import (
    BadgeGroup,
    BatchPayload,
    BatchSaveResponse,
    GroupPayload,
    GroupSaveResponse,
    MessageResponse,
)
from trustbadges.services.position_resolver import installed_plugins
from trustbadges.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["settings"])


@router.get("/settings", response_model=List[BadgeGroup])
async def list_groups(
    user: User = Depends(require_admin),
    store: SettingsStore = Depends(get_settings_store),
):
    """All badge groups in creation order."""
    return await store.list()


@router.post("/settings", response_model=BatchSaveResponse)
async def save_settings(
    payload: BatchPayload,
    user: User = Depends(require_admin_with_csrf),
    store: SettingsStore = Depends(get_settings_store),
):
    """Save the whole settings panel. Either every group is saved or none is."""
    groups = await store.save_batch(payload.groups)
    logger.info(f"User {user.email} saved {len(groups)} badge groups")
    return BatchSaveResponse(message="Settings updated successfully", groups=groups)


@router.post("/settings/group", response_model=GroupSaveResponse)
async def save_group(
    payload: GroupPayload,
    user: User = Depends(require_admin_with_csrf),
    store: SettingsStore = Depends(get_settings_store),
):
    group = await store.save_incoming(payload.group)
    return GroupSaveResponse(message="Group settings saved successfully.", group=group)


@router.get("/settings/group/{group_id}", response_model=BadgeGroup)
async def get_group(
    group_id: str,
    user: User = Depends(require_admin),
    store: SettingsStore = Depends(get_settings_store),
):
    return await store.get(group_id)


@router.delete("/settings/group/{group_id}", response_model=MessageResponse)
async def delete_group(
    group_id: str,
    user: User = Depends(require_admin_with_csrf),
    store: SettingsStore = Depends(get_settings_store),
):
    await store.delete(group_id)
    logger.info(f"User {user.email} deleted badge group {group_id}")
    return MessageResponse(message="Group deleted successfully")


@router.get("/installed-plugins", response_model=Dict[str, bool])
async def get_installed_plugins(user: User = Depends(require_admin)):
    """Which storefront plugins the host reports as installed."""
    return installed_plugins(settings.INSTALLED_PLUGINS)
