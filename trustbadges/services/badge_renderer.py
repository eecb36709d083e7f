"""
Turns a canonical settings record into an HTML fragment and a scoped CSS block.

Rendering is pure: no database or network access, the same input always
produces the same output, and nothing here raises to the caller. Anything
that does not resolve (an unknown size, an unknown badge id) falls back to
the defaults of ``trustbadges.schemas.badge_settings``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from trustbadges.core.badge_catalog import BadgeImageCatalog, get_badge_catalog
from trustbadges.core.config import settings as app_settings
from trustbadges.schemas.badge_settings import BadgeSettings, normalize, resolve_value

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

CONTAINER_ID_PREFIX = "convers-trust-badges-"

SIZE_PIXELS = {
    "extra-small": 32,
    "small": 48,
    "medium": 64,
    "large": 80,
}
FALLBACK_SIZE = 48

JUSTIFY_CONTENT = {
    "left": "flex-start",
    "center": "center",
    "right": "flex-end",
}

MASKED_STYLES = ("mono", "mono-card")

# Groups whose ``position`` setting also aligns the whole container
POSITIONED_GROUPS = ("footer",)

DESIGN = {
    "badge_padding": 5,
    "badge_gap": 10,
    "container_margin": 15,
    "border_radius": 4,
    "hover_transform": "translateY(-2px)",
    "transition": "all 0.3s ease",
    "card_background": "#e5e7eb",
}


@dataclass(frozen=True)
class RenderedBadges:
    html: str
    css: str


def container_id(group_id: str) -> str:
    return f"{CONTAINER_ID_PREFIX}{group_id}"


def size_pixels(size: Optional[str]) -> int:
    return SIZE_PIXELS.get(size, FALLBACK_SIZE)


def justify_content(alignment: Optional[str]) -> str:
    return JUSTIFY_CONTENT.get(alignment, "center")


def margin_style(settings: BadgeSettings) -> str:
    if not settings.custom_margin:
        return ""
    return "margin: {}px {}px {}px {}px;".format(
        int(settings.margin_top),
        int(settings.margin_right),
        int(settings.margin_bottom),
        int(settings.margin_left),
    )


def _build_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )


class BadgeRenderer:
    """Renders badge groups; one instance can be shared across requests."""

    def __init__(
        self,
        asset_base_url: Optional[str] = None,
        catalog: Optional[BadgeImageCatalog] = None,
    ):
        asset_base_url = asset_base_url or app_settings.BADGE_ASSET_BASE_URL
        self.asset_base_url = asset_base_url if asset_base_url.endswith("/") else f"{asset_base_url}/"
        self.catalog = catalog if catalog is not None else get_badge_catalog()
        self.env = _build_environment()

    def render(self, group_id: str, settings: Union[BadgeSettings, Mapping[str, Any], None]) -> RenderedBadges:
        try:
            context = self._context(group_id, normalize(settings))
            html = self.env.get_template("badges/group.html").render(**context)
            css = self.env.get_template("badges/group.css").render(**context)
        except Exception:
            # Presentation only: degrade to an empty container instead of breaking the page
            logger.exception(f"Failed to render badge group {group_id}")
            return RenderedBadges(html=f'<div id="{container_id(group_id)}"></div>', css="")
        return RenderedBadges(html=html.strip(), css=css.strip())

    def resolve_badges(self, selected: List[str]) -> List[Dict[str, str]]:
        """Catalog entries for ``selected``, in order, skipping unknown ids."""
        badges = []
        for badge_id in selected:
            filename = self.catalog.filename(badge_id)
            if filename is None:
                logger.debug(f"Skipping unknown badge id {badge_id!r}")
                continue
            badges.append({"id": badge_id, "url": f"{self.asset_base_url}{filename}"})
        return badges

    def _context(self, group_id: str, settings: BadgeSettings) -> Dict[str, Any]:
        badge_alignment = resolve_value("badge_alignment", settings.badge_alignment)
        animation = resolve_value("animation", settings.animation) if settings.animation else ""
        badge_style = resolve_value("badge_style", settings.badge_style)
        scope = f"#{container_id(group_id)}"

        return {
            "settings": settings,
            "container_id": container_id(group_id),
            "scope": scope,
            "badge_alignment": badge_alignment,
            "header_alignment": resolve_value("alignment", settings.alignment),
            "justify_content": justify_content(badge_alignment),
            "badge_style": badge_style,
            "masked": badge_style in MASKED_STYLES,
            "animation": animation,
            "animation_class": f"badge-{animation}" if animation else "",
            "desktop_size": size_pixels(settings.badge_size_desktop),
            "mobile_size": size_pixels(settings.badge_size_mobile),
            "margin_style": margin_style(settings),
            "badges": self.resolve_badges(settings.selected_badges),
            "footer_justify": (
                justify_content(resolve_value("position", settings.position))
                if group_id in POSITIONED_GROUPS
                else ""
            ),
            "design": DESIGN,
        }
