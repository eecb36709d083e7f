"""
Canonical badge-group settings.

``FIELD_SCHEMA`` is the single source of truth for every settings field: its
kind, its default and, for enumerations, the allowed values. ``resolve_value``
applies the fallback policy: a value that does not fit its field is replaced
by the field default instead of failing the request. The renderer resolves
values through the same function, so storage and rendering always agree on
what an invalid value means.

On the wire the fields are camelCase (``badgeSizeDesktop``); in Python they
are snake_case attributes. Both spellings are accepted on input.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

BOOL = "bool"
TEXT = "text"
NUMERIC = "numeric"
CHOICE = "choice"
COLOR = "color"
BADGE_LIST = "badge_list"

ALIGNMENTS = ("left", "center", "right")
BADGE_STYLES = ("original", "card", "mono", "mono-card")
BADGE_SIZES = ("extra-small", "small", "medium", "large")
ANIMATIONS = ("fade", "slide", "scale", "bounce")

DEFAULT_SELECTED_BADGES = (
    "mastercard",
    "visa-1",
    "paypal-1",
    "apple-pay",
    "stripe",
    "american-express-1",
)

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}
_NUMERIC_RE = re.compile(r"^-?\d+$")
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_COLOR_RE = re.compile(r"^(?:rgb|rgba|hsl|hsla)\(\s*[0-9.%,/\s]+\)$")
_NAMED_COLOR_RE = re.compile(r"^[a-zA-Z]{3,20}$")


@dataclass(frozen=True)
class FieldSpec:
    kind: str
    default: Any
    choices: Tuple[str, ...] = ()

    def default_value(self) -> Any:
        # Hand out a fresh list so callers cannot mutate the shared default
        if isinstance(self.default, tuple):
            return list(self.default)
        return self.default


FIELD_SCHEMA: Dict[str, FieldSpec] = {
    "show_header": FieldSpec(BOOL, True),
    "header_text": FieldSpec(TEXT, "Secure Checkout With"),
    "font_size": FieldSpec(NUMERIC, "18"),
    "alignment": FieldSpec(CHOICE, "center", ALIGNMENTS),
    "badge_alignment": FieldSpec(CHOICE, "center", ALIGNMENTS),
    "position": FieldSpec(CHOICE, "center", ALIGNMENTS),
    "text_color": FieldSpec(COLOR, "#000000"),
    "badge_style": FieldSpec(CHOICE, "original", BADGE_STYLES),
    "badge_size_desktop": FieldSpec(CHOICE, "medium", BADGE_SIZES),
    "badge_size_mobile": FieldSpec(CHOICE, "small", BADGE_SIZES),
    "badge_color": FieldSpec(COLOR, "#0066FF"),
    "custom_margin": FieldSpec(BOOL, False),
    "margin_top": FieldSpec(NUMERIC, "0"),
    "margin_right": FieldSpec(NUMERIC, "0"),
    "margin_bottom": FieldSpec(NUMERIC, "0"),
    "margin_left": FieldSpec(NUMERIC, "0"),
    "animation": FieldSpec(CHOICE, "fade", ANIMATIONS),
    "show_after_add_to_cart": FieldSpec(BOOL, False),
    "show_before_add_to_cart": FieldSpec(BOOL, False),
    "show_on_checkout": FieldSpec(BOOL, False),
    "selected_badges": FieldSpec(BADGE_LIST, DEFAULT_SELECTED_BADGES),
}


def coerce_bool(raw: Any) -> Optional[bool]:
    """Interpret booleans, 0/1 and the usual form strings; None if unrecognised."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _coerce_text(raw: Any) -> Optional[str]:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    return None


def _coerce_numeric(raw: Any) -> Optional[str]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        return str(int(raw)) if raw.is_integer() else None
    if isinstance(raw, str) and _NUMERIC_RE.match(raw.strip()):
        return str(int(raw.strip()))
    return None


def _coerce_choice(raw: Any, choices: Tuple[str, ...]) -> Optional[str]:
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in choices:
            return value
    return None


def _coerce_color(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    value = raw.strip()
    for pattern in (_HEX_COLOR_RE, _FUNC_COLOR_RE, _NAMED_COLOR_RE):
        if pattern.match(value):
            return value
    return None


def _coerce_badge_list(raw: Any) -> Optional[List[str]]:
    if not isinstance(raw, (list, tuple)):
        return None
    badges = []
    for item in raw:
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            item = str(item)
        if isinstance(item, str) and item.strip():
            badges.append(item.strip())
    return badges


def resolve_value(field: str, raw: Any) -> Any:
    """Return ``raw`` coerced to ``field``'s type, or the field default if it does not fit."""
    spec = FIELD_SCHEMA[field]

    if spec.kind == BOOL:
        value = coerce_bool(raw)
    elif spec.kind == TEXT:
        value = _coerce_text(raw)
    elif spec.kind == NUMERIC:
        value = _coerce_numeric(raw)
    elif spec.kind == CHOICE:
        value = _coerce_choice(raw, spec.choices)
    elif spec.kind == COLOR:
        value = _coerce_color(raw)
    elif spec.kind == BADGE_LIST:
        value = _coerce_badge_list(raw)
    else:
        value = None

    return spec.default_value() if value is None else value


def wire_name(field: str) -> str:
    return to_camel(field)


class BadgeSettings(BaseModel):
    """A fully populated settings record. Build it with :func:`normalize`."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    show_header: bool = True
    header_text: str = "Secure Checkout With"
    font_size: str = "18"
    alignment: str = "center"
    badge_alignment: str = "center"
    position: str = "center"
    text_color: str = "#000000"
    badge_style: str = "original"
    badge_size_desktop: str = "medium"
    badge_size_mobile: str = "small"
    badge_color: str = "#0066FF"
    custom_margin: bool = False
    margin_top: str = "0"
    margin_right: str = "0"
    margin_bottom: str = "0"
    margin_left: str = "0"
    animation: str = "fade"
    show_after_add_to_cart: bool = False
    show_before_add_to_cart: bool = False
    show_on_checkout: bool = False
    selected_badges: List[str] = list(DEFAULT_SELECTED_BADGES)

    @model_validator(mode="before")
    @classmethod
    def _apply_field_policy(cls, data: Any) -> Dict[str, Any]:
        if isinstance(data, BadgeSettings):
            return data.model_dump()
        if not isinstance(data, Mapping):
            data = {}

        resolved = {}
        for field in FIELD_SCHEMA:
            alias = wire_name(field)
            if alias in data:
                resolved[field] = resolve_value(field, data[alias])
            elif field in data:
                resolved[field] = resolve_value(field, data[field])
            else:
                resolved[field] = FIELD_SCHEMA[field].default_value()
        return resolved

    def to_wire(self) -> Dict[str, Any]:
        """camelCase dict, the form stored in the database and sent to clients."""
        return self.model_dump(by_alias=True)


def normalize(raw: Any) -> BadgeSettings:
    """Build a complete settings record from arbitrary input. Never raises."""
    if isinstance(raw, BadgeSettings):
        return raw
    return BadgeSettings.model_validate(raw if isinstance(raw, Mapping) else {})


def defaults() -> BadgeSettings:
    return BadgeSettings.model_validate({})
