# template_config.py
"""
User template settings and their fail-open resolution.

A feature flag is disabled only by an explicit boolean ``false``. Absent keys,
``None`` and any other value (0, "", "false") leave the feature enabled.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

HEADER_STYLES = ("simple", "gradient", "boxed")
TABLE_STYLES = ("striped", "bordered", "minimal")

# fontMain identifier -> (regular, bold, italic) built-in PDF fonts
FONT_FAMILIES = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique"),
}

DEFAULT_PRIMARY = "#003366"
DEFAULT_SECONDARY = "#0D6EFD"
DEFAULT_FONT = "helvetica"
DEFAULT_HEADER_STYLE = "gradient"
DEFAULT_TABLE_STYLE = "striped"

# feature key -> JSON key as persisted by the template editor
FEATURE_KEYS = {
    "header": "showHeader",
    "footer": "showFooter",
    "item_details": "showItemDetails",
    "item_notes": "showItemNotes",
    "project_details": "showProjectDetails",
    "client_details": "showClientDetails",
    "terms": "showTerms",
    "notes": "showNotes",
    "signature_line": "showSignatureLine",
    "dates": "showDates",
    "logo": "logo",
}

COLUMN_KEYS = {
    "description": "description",
    "quantity": "quantity",
    "unit_price": "unitPrice",
    "amount": "amount",
    "notes": "notes",
}

_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


def _flag(raw: Mapping, key: str) -> Optional[bool]:
    # Only the literal boolean False counts as "set"; everything else is unset.
    return False if raw.get(key) is False else None


@dataclass(frozen=True)
class TemplateConfig:
    """A stored template as the user left it. ``None`` means 'not set'."""
    show_header: Optional[bool] = None
    show_footer: Optional[bool] = None
    show_item_details: Optional[bool] = None
    show_item_notes: Optional[bool] = None
    show_project_details: Optional[bool] = None
    show_client_details: Optional[bool] = None
    show_terms: Optional[bool] = None
    show_notes: Optional[bool] = None
    show_signature_line: Optional[bool] = None
    show_dates: Optional[bool] = None
    logo: Optional[bool] = None
    header_style: Optional[str] = None
    table_style: Optional[str] = None
    color_primary: Optional[str] = None
    color_secondary: Optional[str] = None
    font_main: Optional[str] = None
    show_columns: Mapping[str, Optional[bool]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping) -> "TemplateConfig":
        flags = {
            ("logo" if name == "logo" else f"show_{name}"): _flag(raw, key)
            for name, key in FEATURE_KEYS.items()
        }
        raw_columns = raw.get("showColumns")
        columns = {}
        if isinstance(raw_columns, Mapping):
            columns = {name: _flag(raw_columns, key) for name, key in COLUMN_KEYS.items()}
        return cls(
            **flags,
            header_style=_str_or_none(raw.get("headerStyle")),
            table_style=_str_or_none(raw.get("tableStyle")),
            color_primary=_str_or_none(raw.get("colorPrimary")),
            color_secondary=_str_or_none(raw.get("colorSecondary")),
            font_main=_str_or_none(raw.get("fontMain")),
            show_columns=columns,
        )

    def to_mapping(self) -> dict:
        out: dict = {}
        for name, key in FEATURE_KEYS.items():
            attr = "logo" if name == "logo" else f"show_{name}"
            if getattr(self, attr) is False:
                out[key] = False
        for attr, key in (("header_style", "headerStyle"), ("table_style", "tableStyle"),
                          ("color_primary", "colorPrimary"), ("color_secondary", "colorSecondary"),
                          ("font_main", "fontMain")):
            if getattr(self, attr) is not None:
                out[key] = getattr(self, attr)
        hidden = {COLUMN_KEYS[name]: False for name, val in self.show_columns.items() if val is False}
        if hidden:
            out["showColumns"] = hidden
        return out


@dataclass(frozen=True)
class ResolvedConfig:
    """Template settings after merging over the hard defaults."""
    flags: Mapping[str, bool]
    columns: Mapping[str, bool]
    header_style: str = DEFAULT_HEADER_STYLE
    table_style: str = DEFAULT_TABLE_STYLE
    color_primary: str = DEFAULT_PRIMARY
    color_secondary: str = DEFAULT_SECONDARY
    font_main: str = DEFAULT_FONT

    @property
    def font_regular(self) -> str:
        return FONT_FAMILIES[self.font_main][0]

    @property
    def font_bold(self) -> str:
        return FONT_FAMILIES[self.font_main][1]

    @property
    def font_italic(self) -> str:
        return FONT_FAMILIES[self.font_main][2]

    def column_enabled(self, name: str) -> bool:
        return self.columns.get(name, True) is not False

    def to_mapping(self) -> dict:
        out = {FEATURE_KEYS[name]: value for name, value in self.flags.items()}
        out.update({
            "headerStyle": self.header_style,
            "tableStyle": self.table_style,
            "colorPrimary": self.color_primary,
            "colorSecondary": self.color_secondary,
            "fontMain": self.font_main,
            "showColumns": {COLUMN_KEYS[name]: value for name, value in self.columns.items()},
        })
        return out


DEFAULT_CONFIG = ResolvedConfig(
    flags={name: True for name in FEATURE_KEYS},
    columns={name: True for name in COLUMN_KEYS},
)


def is_enabled(resolved: ResolvedConfig, feature_key: str) -> bool:
    """True unless the feature key is present and strictly False."""
    return resolved.flags.get(feature_key, True) is not False


def resolve(raw) -> ResolvedConfig:
    """
    Merge a stored template over DEFAULT_CONFIG.

    `raw` may be None, a TemplateConfig, a mapping in the editor's JSON shape,
    or a JSON string. Anything that can't be read gives the defaults.
    """
    if raw is None:
        return DEFAULT_CONFIG
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Unreadable template config; using defaults")
            return DEFAULT_CONFIG
    if isinstance(raw, Mapping):
        raw = TemplateConfig.from_mapping(raw)
    if not isinstance(raw, TemplateConfig):
        logger.warning("Template config of type %s ignored; using defaults", type(raw).__name__)
        return DEFAULT_CONFIG

    flags = {}
    for name in FEATURE_KEYS:
        attr = "logo" if name == "logo" else f"show_{name}"
        flags[name] = getattr(raw, attr) is not False
    columns = {name: raw.show_columns.get(name) is not False for name in COLUMN_KEYS}

    return ResolvedConfig(
        flags=flags,
        columns=columns,
        header_style=_choice(raw.header_style, HEADER_STYLES, DEFAULT_HEADER_STYLE),
        table_style=_choice(raw.table_style, TABLE_STYLES, DEFAULT_TABLE_STYLE),
        color_primary=_color(raw.color_primary, DEFAULT_PRIMARY),
        color_secondary=_color(raw.color_secondary, DEFAULT_SECONDARY),
        font_main=_choice(raw.font_main, tuple(FONT_FAMILIES), DEFAULT_FONT),
    )


def _str_or_none(value) -> Optional[str]:
    return value.strip() if isinstance(value, str) and value.strip() else None


def _choice(value: Optional[str], allowed: tuple, default: str) -> str:
    key = (value or "").strip().lower()
    return key if key in allowed else default


def _color(value: Optional[str], default: str) -> str:
    color = (value or "").strip()
    return color.upper() if _HEX_COLOR.fullmatch(color) else default
