from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trustbadges.schemas.badge_settings import BadgeSettings, defaults, normalize

REQUIRED_PLUGINS = ("woocommerce", "edd")


class BadgeGroup(BaseModel):
    """A badge group as the services and the API see it."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    is_default: bool = False
    is_active: bool = True
    required_plugin: Optional[str] = None
    settings: BadgeSettings = Field(default_factory=defaults)

    @classmethod
    def from_row(cls, row) -> "BadgeGroup":
        return cls(
            id=row.group_id,
            name=row.group_name,
            is_default=bool(row.is_default),
            is_active=bool(row.is_active),
            required_plugin=row.required_plugin,
            settings=normalize(row.settings),
        )


class GroupPayload(BaseModel):
    """Body of ``POST /settings/group``. The group itself is normalized by the service."""

    group: Union[Dict[str, Any], str]


class BatchPayload(BaseModel):
    """Body of ``POST /settings``: the whole settings panel at once."""

    groups: List[Union[Dict[str, Any], str]]


class GroupSaveResponse(BaseModel):
    success: bool = True
    message: str
    group: BadgeGroup


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class BatchSaveResponse(BaseModel):
    success: bool = True
    message: str
    groups: List[BadgeGroup]
