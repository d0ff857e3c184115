# draw.py
"""
Draw commands produced by layout and consumed by pdf_writer.

Coordinates are in points with y growing DOWN the page. Blocks carry y
relative to their own top edge; PageStream shifts them onto the page.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Union

from images import EmbeddedImage

# Palette shared by the section renderers
TEXT = "#3C3C3C"
TEXT_SOFT = "#505050"
TEXT_MUTED = "#787878"
RULE = "#DCDCDC"
RULE_DARK = "#B4B4B4"
HEADER_BG = "#F7FAFC"
ROW_ALT_BG = "#F2F5F8"
WHITE = "#FFFFFF"
GREEN = "#27AE60"
RED = "#E74C3C"
AMBER = "#F59E0B"
ERROR_RED = "#C80000"


@dataclass(frozen=True)
class TextCommand:
    x: float
    y: float  # baseline
    text: str
    font: str
    size: float
    color: str = TEXT
    align: str = "left"  # left | right | center

    def shifted(self, dy: float) -> "TextCommand":
        return replace(self, y=self.y + dy)


@dataclass(frozen=True)
class RectCommand:
    x: float
    y: float  # top edge
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 1.0
    radius: float = 0.0

    def shifted(self, dy: float) -> "RectCommand":
        return replace(self, y=self.y + dy)


@dataclass(frozen=True)
class LineCommand:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = RULE
    width: float = 0.75

    def shifted(self, dy: float) -> "LineCommand":
        return replace(self, y1=self.y1 + dy, y2=self.y2 + dy)


@dataclass(frozen=True)
class ImageCommand:
    x: float
    y: float  # top edge
    width: float
    height: float
    image: EmbeddedImage

    def shifted(self, dy: float) -> "ImageCommand":
        return replace(self, y=self.y + dy)


DrawCommand = Union[TextCommand, RectCommand, LineCommand, ImageCommand]


@dataclass(frozen=True)
class Block:
    """A laid-out section: its height and its commands relative to its top."""
    height: float
    commands: tuple = ()
    name: str = ""

    @property
    def is_empty(self) -> bool:
        return self.height <= 0 and not self.commands


EMPTY_BLOCK = Block(0.0, ())
