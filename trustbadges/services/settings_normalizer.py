"""
Turns a group as submitted by a client into a validated ``BadgeGroup``.

Clients send groups in several shapes: form posts where nested objects arrive
as JSON strings, camelCase or snake_case keys, booleans as ``"1"``/``"on"``.
Everything is reduced here to the canonical record before it reaches the store.
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from trustbadges.core.errors import ValidationError
from trustbadges.schemas.badge_group import REQUIRED_PLUGINS, BadgeGroup
from trustbadges.schemas.badge_settings import coerce_bool, normalize

logger = logging.getLogger(__name__)

GROUP_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def decode_json_strings(value: Any) -> Any:
    """JSON-decode a string that looks like an object or array; leave anything else alone."""
    if isinstance(value, str) and value.lstrip().startswith(("{", "[")):
        try:
            return json.loads(value)
        except ValueError:
            logger.debug("Keeping undecodable JSON-looking string as is")
            return value
    return value


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def incoming_id(raw_group: Any) -> Optional[str]:
    """The id a client put on ``raw_group``, or None when it carries none."""
    raw_group = decode_json_strings(raw_group)
    if not isinstance(raw_group, Mapping):
        return None
    group_id = _pick(raw_group, "id", "groupId", "group_id")
    if group_id is None or group_id == "" or isinstance(group_id, bool):
        return None
    return str(group_id)


class SettingsNormalizer:
    """Validates incoming groups. Stateless; the store supplies ``next_id``."""

    def normalize_incoming(self, raw_group: Any, next_id: Optional[str] = None) -> BadgeGroup:
        raw_group = decode_json_strings(raw_group)
        if not isinstance(raw_group, Mapping):
            raise ValidationError.for_field("group", "Group must be an object")

        raw = {key: decode_json_strings(value) for key, value in raw_group.items()}
        errors: List[Dict[str, str]] = []

        name = _pick(raw, "name", "groupName", "group_name")
        if not isinstance(name, str) or not name.strip():
            errors.append({"field": "name", "message": "Group name is required"})
            name = ""

        is_default = coerce_bool(_pick(raw, "isDefault", "is_default")) or False

        group_id = _pick(raw, "id", "groupId", "group_id")
        if isinstance(group_id, int) and not isinstance(group_id, bool):
            group_id = str(group_id)
        if group_id is None or group_id == "":
            if is_default:
                errors.append({"field": "id", "message": "Default groups must carry their id"})
            elif next_id is None:
                errors.append({"field": "id", "message": "Group id is required"})
            group_id = next_id
        elif not isinstance(group_id, str) or not GROUP_ID_RE.match(group_id):
            errors.append({
                "field": "id",
                "message": "Group id may only contain letters, digits, '-' and '_'",
            })

        settings = _pick(raw, "settings")
        if settings is None:
            errors.append({"field": "settings", "message": "Settings are required"})
            settings = {}
        elif isinstance(settings, Mapping):
            settings = {key: decode_json_strings(value) for key, value in settings.items()}
        else:
            errors.append({"field": "settings", "message": "Settings must be an object"})
            settings = {}

        raw_active = _pick(raw, "isActive", "is_active")
        is_active = True if raw_active is None else coerce_bool(raw_active)
        if is_active is None:
            is_active = True

        required_plugin = _pick(raw, "requiredPlugin", "required_plugin")
        if required_plugin in (None, "", False):
            required_plugin = None
        elif not isinstance(required_plugin, str) or required_plugin not in REQUIRED_PLUGINS:
            errors.append({
                "field": "requiredPlugin",
                "message": f"Required plugin must be one of: {', '.join(REQUIRED_PLUGINS)}",
            })

        if errors:
            label = group_id or name or "group"
            raise ValidationError(f"Invalid group {label}", errors=errors)

        return BadgeGroup(
            id=group_id,
            name=name.strip(),
            is_default=is_default,
            is_active=is_active,
            required_plugin=required_plugin,
            settings=normalize(settings),
        )
