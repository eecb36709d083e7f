import re

import pytest

from trustbadges.core.badge_catalog import BadgeImageCatalog, get_badge_catalog
from trustbadges.schemas.badge_settings import normalize
from trustbadges.services.badge_renderer import BadgeRenderer, RenderedBadges


@pytest.fixture
def renderer():
    return BadgeRenderer(asset_base_url="/static/badges/")


def _images(html: str):
    return re.findall(r"<img [^>]*>", html)


class TestCatalog:
    def test_shipped_catalog_knows_default_badges(self):
        catalog = get_badge_catalog()
        for badge_id in normalize({}).selected_badges:
            assert badge_id in catalog
        assert catalog.filename("visa-1") == "visa-1.svg"
        assert catalog.filename("nonexistent-id") is None


class TestMarkup:
    def test_root_element_is_scoped_container(self, renderer):
        rendered = renderer.render("checkout", normalize({}))
        assert isinstance(rendered, RenderedBadges)
        assert rendered.html.startswith('<div id="convers-trust-badges-checkout">')

    def test_default_badges_render_in_order(self, renderer):
        html = renderer.render("checkout", {}).html
        ids = re.findall(r'data-badge-id="([^"]+)"', html)
        assert ids == ["mastercard", "visa-1", "paypal-1", "apple-pay", "stripe", "american-express-1"]
        assert 'src="/static/badges/visa-1.svg"' in html

    def test_unknown_badge_ids_render_no_images(self, renderer):
        html = renderer.render("promo", {"selectedBadges": ["nonexistent-id"]}).html
        assert _images(html) == []
        assert "nonexistent-id" not in html

    def test_unknown_ids_are_skipped_among_known_ones(self, renderer):
        html = renderer.render("promo", {"selectedBadges": ["visa-1", "nope", "stripe"]}).html
        assert re.findall(r'data-badge-id="([^"]+)"', html) == ["visa-1", "stripe"]

    def test_header_is_optional(self, renderer):
        with_header = renderer.render("promo", {"headerText": "Pay safely"}).html
        without_header = renderer.render("promo", {"headerText": "Pay safely", "showHeader": False}).html
        assert "Pay safely" in with_header
        assert "Pay safely" not in without_header

    def test_header_text_is_escaped(self, renderer):
        html = renderer.render("promo", {"headerText": "<script>alert(1)</script>"}).html
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    @pytest.mark.parametrize("style", ["mono", "mono-card"])
    def test_mono_styles_render_masked_shapes(self, renderer, style):
        html = renderer.render("promo", {"badgeStyle": style, "badgeColor": "#ff0000"}).html
        assert _images(html) == []
        assert "mask: url(" in html
        assert "#ff0000" in html

    @pytest.mark.parametrize("style", ["original", "card"])
    def test_other_styles_render_images(self, renderer, style):
        html = renderer.render("promo", {"badgeStyle": style}).html
        assert len(_images(html)) == 6

    def test_animation_class(self, renderer):
        html = renderer.render("promo", {"animation": "bounce"}).html
        assert "badge-bounce" in html


class TestStyles:
    def test_desktop_and_mobile_sizes(self, renderer):
        css = renderer.render("promo", {"badgeSizeDesktop": "large", "badgeSizeMobile": "unknown-value"}).css
        assert "80px" in css
        assert "48px" in css
        assert "min-width: 768px" in css

    @pytest.mark.parametrize("size, pixels", [("extra-small", 32), ("small", 48), ("medium", 64), ("large", 80)])
    def test_size_table(self, renderer, size, pixels):
        html = renderer.render("promo", {"badgeSizeMobile": size}).html
        assert f"width: {pixels}px" in html

    def test_margin_only_with_custom_margin(self, renderer):
        margins = {"marginTop": "4", "marginRight": "8", "marginBottom": "12", "marginLeft": "16"}
        without = renderer.render("promo", margins)
        with_margin = renderer.render("promo", dict(margins, customMargin=True))

        assert "margin: 4px 8px 12px 16px;" not in without.html + without.css
        assert "margin: 4px 8px 12px 16px;" in with_margin.css

    def test_every_rule_is_scoped(self, renderer):
        css = renderer.render("promo", {"animation": "slide"}).css
        selectors = re.findall(r"^\s*([^{}@\n][^{}\n]*)\{", css, flags=re.MULTILINE)
        rule_selectors = [s for s in selectors if not re.match(r"\s*(from|to|\d+%)", s)]
        assert rule_selectors
        for selector in rule_selectors:
            for part in selector.split(","):
                assert part.strip().startswith("#convers-trust-badges-promo"), part

    def test_two_groups_do_not_collide(self, renderer):
        first = renderer.render("checkout", {"badgeStyle": "card"})
        second = renderer.render("promo", {"badgeStyle": "mono"})
        assert "#convers-trust-badges-checkout" in first.css
        assert "#convers-trust-badges-promo" not in first.css
        assert "#convers-trust-badges-promo" in second.css
        assert "#convers-trust-badges-checkout" not in second.css

    @pytest.mark.parametrize("animation, keyframes", [
        ("fade", "badgeFadeIn"),
        ("slide", "badgeSlideIn"),
        ("scale", "badgeScaleIn"),
        ("bounce", "badgeBounceIn"),
    ])
    def test_keyframes_per_animation(self, renderer, animation, keyframes):
        css = renderer.render("promo", {"animation": animation}).css
        assert f"@keyframes {keyframes}" in css
        assert "animation-delay: calc(var(--badge-index, 0) * 0.1s)" in css

    def test_stagger_index_counts_rendered_badges_only(self, renderer):
        html = renderer.render("promo", {
            "animation": "fade",
            "selectedBadges": ["visa-1", "nope", "stripe", "paypal-1"],
        }).html
        assert re.findall(r"--badge-index: (\d+);", html) == ["0", "1", "2"]
        assert re.findall(r'data-badge-id="([^"]+)"', html) == ["visa-1", "stripe", "paypal-1"]

    def test_footer_position_block(self, renderer):
        footer = renderer.render("footer", {"position": "right"}).css
        other = renderer.render("checkout", {"position": "right"}).css
        assert "flex-end" in footer
        assert footer.count("justify-content") > other.count("justify-content")

    def test_rendering_is_deterministic(self, renderer):
        settings = {"badgeStyle": "card", "animation": "scale", "customMargin": "1"}
        assert renderer.render("promo", settings) == renderer.render("promo", settings)


class TestFailureHandling:
    def test_broken_catalog_degrades_to_empty_container(self):
        class BrokenCatalog(BadgeImageCatalog):
            def filename(self, badge_id):
                raise RuntimeError("catalog unavailable")

        renderer = BadgeRenderer(asset_base_url="/static/badges/", catalog=BrokenCatalog({}))
        rendered = renderer.render("checkout", {})
        assert rendered == RenderedBadges(html='<div id="convers-trust-badges-checkout"></div>', css="")
