# page_stream.py
"""Page geometry and the cursor that places blocks and breaks pages."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm

from draw import Block

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}


class LayoutError(RuntimeError):
    """A single block is taller than an empty page can hold."""


@dataclass(frozen=True)
class PageGeometry:
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 20 * mm
    footer_height: float = 17 * mm

    @classmethod
    def for_page_size(cls, name: str | None) -> "PageGeometry":
        width, height = PAGE_SIZES.get((name or "A4").strip().upper(), A4)
        return cls(page_width=width, page_height=height)

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.page_width - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_top(self) -> float:
        return self.margin

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.footer_height

    @property
    def content_height(self) -> float:
        return self.content_bottom - self.content_top


@dataclass
class Page:
    number: int
    commands: list = field(default_factory=list)
    cursor: float = 0.0  # offset from the content top


class PageStream:
    """
    Pages and the cursor for one render call.

    Everything placed through place() lands below the cursor; a block that
    doesn't fit in what's left of the page goes to the top of a new page.
    """

    def __init__(self, geometry: PageGeometry):
        self.geometry = geometry
        self.pages: list[Page] = [Page(number=1)]

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def cursor(self) -> float:
        return self.page.cursor

    @property
    def remaining(self) -> float:
        return self.geometry.content_height - self.page.cursor

    def fits(self, height: float) -> bool:
        return self.page.cursor + height <= self.geometry.content_height

    def new_page(self) -> Page:
        page = Page(number=len(self.pages) + 1)
        self.pages.append(page)
        logger.debug("Page break -> page %d", page.number)
        return page

    def advance(self, height: float) -> None:
        """Move the cursor down, clamped to the content bottom."""
        self.page.cursor = min(self.geometry.content_height, self.page.cursor + max(0.0, height))

    def place(self, block: Block) -> float:
        """Put `block` at the cursor (breaking first if needed). Returns its page y."""
        if block.is_empty:
            return self.geometry.content_top + self.page.cursor
        if block.height > self.geometry.content_height:
            raise LayoutError(
                f"block {block.name or '?'} is {block.height:.1f}pt tall; "
                f"a page holds {self.geometry.content_height:.1f}pt"
            )
        if not self.fits(block.height):
            self.new_page()
        top = self.geometry.content_top + self.page.cursor
        self.page.commands.extend(cmd.shifted(top) for cmd in block.commands)
        self.page.cursor += block.height
        return top

    def stamp(self, page: Page, commands) -> None:
        """Add commands already in page coordinates (footers)."""
        page.commands.extend(commands)

    @property
    def page_count(self) -> int:
        return len(self.pages)
