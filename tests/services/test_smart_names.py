"""Tests for smart names and display names."""

import pytest

from graph_bridge.core.models import SmartName
from graph_bridge.services.smart_names import display_name, group_names, infer_smart_type, translate


class TestSmartName:
    """Test suite for SmartName resolution."""

    @pytest.mark.parametrize("raw", [False, "ignore"])
    def test_ignored(self, raw):
        """Test false and 'ignore' exclude the object."""
        smart_name = SmartName.from_raw(raw)

        assert smart_name.is_ignored
        assert not smart_name.is_valid("en")

    def test_missing(self):
        """Test a missing annotation is neither ignored nor valid."""
        smart_name = SmartName.from_raw(None)

        assert smart_name.kind == "missing"
        assert not smart_name.is_ignored
        assert not smart_name.is_valid("en")

    def test_plain_string(self):
        """Test a plain string is an English name."""
        smart_name = SmartName.from_raw("Garden lamp")

        assert smart_name.kind == "plain"
        assert smart_name.display_name("de") == "Garden lamp"

    def test_detailed(self):
        """Test per-language names and options are separated."""
        smart_name = SmartName.from_raw(
            {"de": "Gartenlampe", "en": "Garden lamp", "smartType": "LIGHT", "byON": 80, "toggle": True}
        )

        assert smart_name.names == {"de": "Gartenlampe", "en": "Garden lamp"}
        assert smart_name.smart_type == "LIGHT"
        assert smart_name.by_on == "80"
        assert smart_name.toggle is True
        assert smart_name.display_name("de") == "Gartenlampe"
        assert smart_name.display_name("fr") == "Garden lamp"

    def test_german_fallback(self):
        """Test German is used when neither the language nor English exists."""
        assert SmartName.from_raw({"de": "Licht"}).display_name("fr") == "Licht"

    def test_options_only_is_not_valid(self):
        """Test a smart name without any text is not a control."""
        assert not SmartName.from_raw({"smartType": "socket"}).is_valid("en")


class TestNames:
    """Test suite for name helpers."""

    def test_translate(self):
        """Test language fallback order."""
        text = {"de": "Küche", "en": "Kitchen"}

        assert translate(text, "de") == "Küche"
        assert translate(text, "fr") == "Kitchen"
        assert translate({"ru": "Кухня"}, "fr") == "Кухня"
        assert translate("Kitchen", "de") == "Kitchen"
        assert translate(None, "en") is None

    def test_display_name_fallbacks(self):
        """Test display names are never empty."""
        assert display_name(None, "en", "hm-rpc.0.LEQ001.1") == "1"
        assert display_name("", "en", "") == "Unnamed"

    def test_group_names(self):
        """Test comma-separated smart names split into several names."""
        assert group_names(SmartName.from_raw("Lamp, Light ,"), "en") == ["Lamp", "Light"]
        assert group_names(SmartName.from_raw(None), "en") == []

    @pytest.mark.parametrize(
        ("value_type", "expected"),
        [("number", "dimmer"), ("boolean", "power"), ("mixed", "power"), (None, "power")],
    )
    def test_infer_smart_type(self, value_type, expected):
        """Test the default smart type by value type."""
        assert infer_smart_type(value_type) == expected
