"""Public render endpoints used by storefront pages to fetch badge markup."""

import logging

from fastapi import APIRouter, Depends

from trustbadges.core.service_dependencies import get_position_resolver
from trustbadges.services.position_resolver import DisplayOutcome, PositionResolver, Rendered

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/display", tags=["display"])


def outcome_to_dict(outcome: DisplayOutcome) -> dict:
    if isinstance(outcome, Rendered):
        return {
            "rendered": True,
            "groupId": outcome.group_id,
            "html": outcome.html,
            "css": outcome.css,
        }
    return {
        "rendered": False,
        "groupId": outcome.group_id,
        "reason": outcome.reason,
    }


@router.get("/group/{group_id}")
async def display_group(
    group_id: str,
    resolver: PositionResolver = Depends(get_position_resolver),
):
    return outcome_to_dict(await resolver.display_group(group_id))


@router.get("/{trigger}")
async def display_trigger(
    trigger: str,
    resolver: PositionResolver = Depends(get_position_resolver),
):
    return outcome_to_dict(await resolver.display(trigger))
