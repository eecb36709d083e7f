"""
Maps storefront render triggers to badge groups and decides whether to show them.

Each trigger names the group it renders, the host capability it depends on
and the settings flag that switches that position on. Anything not in the
table is treated as a generic page footer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

from trustbadges.schemas.badge_group import REQUIRED_PLUGINS, BadgeGroup
from trustbadges.services.badge_renderer import BadgeRenderer
from trustbadges.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

FALLBACK_GROUP = "footer"


@dataclass(frozen=True)
class Trigger:
    group_id: str
    capability: Optional[str] = None
    flag: Optional[str] = None


TRIGGERS: Dict[str, Trigger] = {
    "woocommerce_after_add_to_cart_form": Trigger("product_page", "woocommerce", "show_after_add_to_cart"),
    "woocommerce_before_add_to_cart_form": Trigger("product_page", "woocommerce", "show_before_add_to_cart"),
    "woocommerce_pay_order_after_submit": Trigger("checkout", "woocommerce", "show_on_checkout"),
    "woocommerce_after_cart_totals": Trigger("checkout", "woocommerce", "show_on_checkout"),
    "edd_purchase_link_end": Trigger("product_page", "edd", "show_after_add_to_cart"),
    "edd_checkout_before_purchase_form": Trigger("checkout", "edd", "show_on_checkout"),
}

FOOTER_TRIGGER = Trigger(FALLBACK_GROUP)


@dataclass(frozen=True)
class Rendered:
    group_id: str
    html: str
    css: str


@dataclass(frozen=True)
class Skipped:
    group_id: str
    reason: str


DisplayOutcome = Union[Rendered, Skipped]


def lookup_trigger(trigger: str) -> Trigger:
    return TRIGGERS.get(trigger, FOOTER_TRIGGER)


def resolve_group(trigger: str) -> str:
    return lookup_trigger(trigger).group_id


def installed_plugins(plugins: Iterable[str]) -> Dict[str, bool]:
    """Host capability report, one flag per plugin a group can depend on."""
    present = {plugin.strip().lower() for plugin in plugins}
    return {plugin: plugin in present for plugin in REQUIRED_PLUGINS}


class PositionResolver:
    def __init__(self, store: SettingsStore, renderer: BadgeRenderer, plugins: Iterable[str]):
        self.store = store
        self.renderer = renderer
        self.capabilities = installed_plugins(plugins)

    def _has_capability(self, capability: Optional[str]) -> bool:
        return capability is None or self.capabilities.get(capability, False)

    def _ineligibility(self, group: BadgeGroup, trigger: Trigger) -> Optional[str]:
        if not group.is_active:
            return "group is inactive"
        if not self._has_capability(group.required_plugin):
            return f"required plugin {group.required_plugin} is not installed"
        if not self._has_capability(trigger.capability):
            return f"trigger requires {trigger.capability}"
        if trigger.flag and not getattr(group.settings, trigger.flag):
            return f"{trigger.flag} is disabled"
        return None

    async def _render(self, group_id: str, trigger: Trigger) -> DisplayOutcome:
        group = await self.store.find(group_id)
        if group is None:
            return Skipped(group_id=group_id, reason="group does not exist")

        reason = self._ineligibility(group, trigger)
        if reason is not None:
            logger.debug(f"Skipping badge group {group_id}: {reason}")
            return Skipped(group_id=group_id, reason=reason)

        rendered = self.renderer.render(group.id, group.settings)
        return Rendered(group_id=group.id, html=rendered.html, css=rendered.css)

    async def display(self, trigger: str) -> DisplayOutcome:
        """Render whatever group ``trigger`` maps to, if it is eligible there."""
        entry = lookup_trigger(trigger)
        return await self._render(entry.group_id, entry)

    async def display_group(self, group_id: str) -> DisplayOutcome:
        """Render a group by id, checking only that it is active and its plugin is present."""
        return await self._render(group_id, Trigger(group_id))
