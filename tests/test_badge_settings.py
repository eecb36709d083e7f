import pytest
from pydantic import ValidationError as PydanticValidationError

from trustbadges.schemas.badge_settings import (
    DEFAULT_SELECTED_BADGES,
    FIELD_SCHEMA,
    BadgeSettings,
    coerce_bool,
    defaults,
    normalize,
    resolve_value,
)


class TestDefaults:
    """Every field is always present, defaulted when missing."""

    def test_empty_input_yields_defaults(self):
        settings = normalize({})
        assert settings == defaults()
        assert settings.header_text == "Secure Checkout With"
        assert settings.font_size == "18"
        assert settings.badge_size_desktop == "medium"
        assert settings.badge_size_mobile == "small"
        assert settings.badge_color == "#0066FF"
        assert settings.animation == "fade"
        assert settings.selected_badges == list(DEFAULT_SELECTED_BADGES)

    def test_non_mapping_input_yields_defaults(self):
        assert normalize(None) == defaults()
        assert normalize("not settings") == defaults()
        assert normalize(["a", "b"]) == defaults()

    def test_wire_form_has_every_field_in_camel_case(self):
        wire = defaults().to_wire()
        assert len(wire) == len(FIELD_SCHEMA)
        assert "badgeSizeDesktop" in wire
        assert "showAfterAddToCart" in wire
        assert "badge_size_desktop" not in wire

    def test_default_badge_list_is_not_shared(self):
        first = defaults()
        first.selected_badges.append("stripe")
        assert defaults().selected_badges == list(DEFAULT_SELECTED_BADGES)


class TestNormalization:
    def test_normalize_is_idempotent(self):
        raw = {
            "badgeStyle": "mono-card",
            "badgeSizeDesktop": "large",
            "customMargin": "1",
            "marginTop": 12.0,
            "selectedBadges": ["visa-1", "", 7],
            "unknownKey": "dropped",
        }
        once = normalize(raw)
        twice = normalize(once.to_wire())
        assert once == twice

    def test_unknown_keys_are_dropped(self):
        wire = normalize({"somethingElse": 1, "headerText": "Hi"}).to_wire()
        assert "somethingElse" not in wire
        assert wire["headerText"] == "Hi"

    def test_snake_case_keys_are_accepted(self):
        settings = normalize({"badge_style": "card", "show_on_checkout": "yes"})
        assert settings.badge_style == "card"
        assert settings.show_on_checkout is True

    def test_camel_case_wins_over_snake_case(self):
        settings = normalize({"badgeStyle": "mono", "badge_style": "card"})
        assert settings.badge_style == "mono"

    def test_invalid_values_fall_back_to_defaults(self):
        settings = normalize({
            "alignment": "diagonal",
            "badgeSizeMobile": "unknown-value",
            "textColor": "not a color!",
            "fontSize": "big",
            "customMargin": "maybe",
            "animation": "spin",
            "selectedBadges": "visa-1",
        })
        assert settings.alignment == "center"
        assert settings.badge_size_mobile == "small"
        assert settings.text_color == "#000000"
        assert settings.font_size == "18"
        assert settings.custom_margin is False
        assert settings.animation == "fade"
        assert settings.selected_badges == list(DEFAULT_SELECTED_BADGES)

    def test_settings_are_immutable(self):
        settings = defaults()
        with pytest.raises(PydanticValidationError):
            settings.badge_style = "card"

    def test_model_validate_applies_policy(self):
        settings = BadgeSettings.model_validate({"badgeSizeDesktop": "huge"})
        assert settings.badge_size_desktop == "medium"


class TestCoercion:
    @pytest.mark.parametrize("raw", [True, 1, "1", "true", "TRUE", "yes", "on"])
    def test_truthy_values(self, raw):
        assert coerce_bool(raw) is True

    @pytest.mark.parametrize("raw", [False, 0, "0", "false", "no", "off", ""])
    def test_falsy_values(self, raw):
        assert coerce_bool(raw) is False

    @pytest.mark.parametrize("raw", [2, "maybe", None, [], 1.5])
    def test_unrecognised_values(self, raw):
        assert coerce_bool(raw) is None

    def test_numeric_fields_are_stored_as_strings(self):
        assert resolve_value("margin_top", 10) == "10"
        assert resolve_value("margin_top", 10.0) == "10"
        assert resolve_value("margin_top", " 7 ") == "7"
        assert resolve_value("margin_top", "-4") == "-4"
        assert resolve_value("margin_top", 10.5) == "0"
        assert resolve_value("margin_top", True) == "0"

    @pytest.mark.parametrize("color", ["#fff", "#A1B2C3", "#a1b2c3d4", "rgb(1, 2, 3)", "hsla(120, 50%, 50%, 0.3)", "red"])
    def test_valid_colors_are_kept(self, color):
        assert resolve_value("badge_color", color) == color

    @pytest.mark.parametrize("color", ["#ggg", "url(evil)", "red;}body{", 42, None])
    def test_invalid_colors_fall_back(self, color):
        assert resolve_value("badge_color", color) == "#0066FF"

    def test_choices_are_case_insensitive(self):
        assert resolve_value("badge_style", " Mono-Card ") == "mono-card"

    def test_badge_list_drops_empty_and_non_string_entries(self):
        assert resolve_value("selected_badges", ["visa-1", "", None, True, " stripe "]) == ["visa-1", "stripe"]

    def test_empty_badge_list_is_kept(self):
        assert resolve_value("selected_badges", []) == []
