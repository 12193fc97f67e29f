"""Tests for the indicator registry, color palette and layout presets."""

import pytest

from chartpilot.indicators.colors import get_color_by_name, is_valid_color, normalize_color
from chartpilot.indicators.layouts import (
    build_layout_indicator_stack,
    get_layout_preset_by_id,
    get_layout_presets,
)
from chartpilot.indicators.registry import (
    LINE_PALETTE,
    IndicatorDefinition,
    IndicatorRegistry,
    build_default_lines,
    get_default_registry,
)


class TestIndicatorRegistry:

    def test_default_registry_is_shared(self):
        assert get_default_registry() is get_default_registry()

    def test_lookup_by_name_and_alias(self):
        registry = get_default_registry()
        assert registry.get("rsi").name == "RSI"
        assert registry.get("Stoch").name == "KDJ"
        assert registry.get("bollinger bands").name == "BOLL"
        assert registry.get("nope") is None
        assert "ema" in registry
        assert "nope" not in registry

    def test_canonical_name_passes_unknown_through(self):
        registry = get_default_registry()
        assert registry.canonical_name("volume") == "VOL"
        assert registry.canonical_name("Custom") == "Custom"

    def test_registry_is_read_only(self):
        registry = get_default_registry()
        with pytest.raises(TypeError):
            registry._by_name["NEW"] = IndicatorDefinition("NEW")

    def test_custom_registry(self):
        registry = IndicatorRegistry((IndicatorDefinition("ZZ", (3,), False, "#123456", ("zeta",)),))
        assert len(registry) == 1
        assert registry.names() == ["ZZ"]
        assert registry.get("zeta").default_params == (3,)
        assert registry.get("zeta").separate_pane is True

    def test_validate_params(self):
        registry = get_default_registry()
        assert registry.validate_params("RSI", [14]) == []
        assert registry.validate_params("RSI", None) == []
        errors = registry.validate_params("MACD", [12, -1, "x"])
        assert errors == ["param2 out of range", "param3 must be a number"]

    def test_build_default_lines(self):
        lines = build_default_lines(3, "#F472B6")
        assert [line["color"] for line in lines] == ["#F472B6", LINE_PALETTE[1], LINE_PALETTE[2]]
        assert build_default_lines(0) == [{"color": LINE_PALETTE[0], "size": 1, "style": "solid"}]


class TestColors:

    def test_normalize_color_names(self):
        assert normalize_color("purple") == "#A78BFA"
        assert normalize_color(" Blue ") == "#3B82F6"
        assert normalize_color("#123456") == "#123456"
        assert normalize_color(None) is None

    def test_palette_membership(self):
        assert is_valid_color("#a78bfa")
        assert not is_valid_color("#000001")

    def test_get_color_by_name(self):
        assert get_color_by_name("cyan") == "#22D3EE"
        assert get_color_by_name("magenta") is None


class TestLayoutPresets:

    def test_presets_per_profile(self):
        assert len(get_layout_presets("day_trade")) == 3
        assert len(get_layout_presets("swing_trade")) == 3
        assert len(get_layout_presets()) == 6

    def test_lookup_by_id(self):
        preset = get_layout_preset_by_id("swing_boll_rsi_obv")
        assert preset is not None
        assert preset.preferred_timeframes[0] == "1D"
        assert get_layout_preset_by_id("missing") is None

    def test_build_stack_normalizes_each_indicator(self):
        preset = get_layout_preset_by_id("day_ema_kdj_vol")
        stack = build_layout_indicator_stack(preset)

        assert [item.indicator for item in stack] == ["EMA", "KDJ", "VOL"]
        assert stack[0].options["calcParams"] == [9, 21, 50]
        assert len(stack[0].options["styles"]["lines"]) == 3
        assert len(stack[2].options["styles"]["lines"]) == 3
