"""
Tests for template_config module.

Flags are fail-open: only an explicit boolean false turns a feature off.
"""

import pytest

from template_config import (
    DEFAULT_CONFIG,
    FEATURE_KEYS,
    TemplateConfig,
    is_enabled,
    resolve,
)


class TestResolveDefaults:
    """resolve() on empty and unreadable input."""

    @pytest.mark.parametrize("raw", [None, {}, "{}", "not json", "[1, 2]", 42])
    def test_defaults(self, raw):
        assert resolve(raw) == DEFAULT_CONFIG

    def test_default_values(self):
        cfg = resolve(None)
        assert cfg.header_style == "gradient"
        assert cfg.table_style == "striped"
        assert cfg.color_primary == "#003366"
        assert cfg.font_regular == "Helvetica"
        assert all(is_enabled(cfg, name) for name in FEATURE_KEYS)


class TestResolveFlags:
    """Explicit false disables; everything else enables."""

    def test_show_terms_false_only_disables_terms(self):
        cfg = resolve({"showTerms": False})
        assert not is_enabled(cfg, "terms")
        others = [name for name in FEATURE_KEYS if name != "terms"]
        assert all(is_enabled(cfg, name) for name in others)

    @pytest.mark.parametrize("value", [0, "", "false", None, "no"])
    def test_non_boolean_values_enable(self, value):
        cfg = resolve({"showNotes": value})
        assert is_enabled(cfg, "notes")

    def test_logo_flag(self):
        assert not is_enabled(resolve({"logo": False}), "logo")

    def test_json_string_input(self):
        cfg = resolve('{"showFooter": false, "tableStyle": "bordered"}')
        assert not is_enabled(cfg, "footer")
        assert cfg.table_style == "bordered"

    def test_columns(self):
        cfg = resolve({"showColumns": {"unitPrice": False, "notes": 0}})
        assert not cfg.column_enabled("unit_price")
        assert cfg.column_enabled("notes")
        assert cfg.column_enabled("quantity")


class TestResolveStyles:
    """Style, color and font fallbacks."""

    def test_valid_values_kept(self):
        cfg = resolve({"headerStyle": "Boxed", "colorPrimary": "#aabbcc", "fontMain": "times"})
        assert cfg.header_style == "boxed"
        assert cfg.color_primary == "#AABBCC"
        assert cfg.font_bold == "Times-Bold"

    def test_invalid_values_fall_back(self):
        cfg = resolve({"headerStyle": "wavy", "colorPrimary": "navy", "fontMain": "comic", "tableStyle": 3})
        assert cfg.header_style == "gradient"
        assert cfg.color_primary == "#003366"
        assert cfg.font_main == "helvetica"
        assert cfg.table_style == "striped"


class TestTemplateConfigMapping:
    """TemplateConfig <-> editor JSON."""

    def test_to_mapping_keeps_only_set_values(self):
        tc = TemplateConfig.from_mapping({
            "showTerms": False,
            "showNotes": True,
            "headerStyle": "simple",
            "showColumns": {"quantity": False},
            "unknownKey": 1,
        })
        assert tc.to_mapping() == {
            "showTerms": False,
            "headerStyle": "simple",
            "showColumns": {"quantity": False},
        }

    def test_resolve_accepts_template_config(self):
        tc = TemplateConfig(show_dates=False)
        assert not is_enabled(resolve(tc), "dates")

    def test_resolved_to_mapping(self):
        out = resolve({"showHeader": False}).to_mapping()
        assert out["showHeader"] is False
        assert out["showFooter"] is True
        assert out["showColumns"]["unitPrice"] is True
