# table_layout.py
"""
Line-item table: column schema, fixed-height rows, page breaks.

Rows are never split. Before each row the engine checks
cursor + ROW_HEIGHT against the content height; on overflow it starts a new
page and draws the header row again before continuing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from reportlab.lib.units import mm

from documents import LineItem
from draw import RULE, RULE_DARK, HEADER_BG, ROW_ALT_BG, TEXT, Block, LineCommand, RectCommand
from page_stream import PageStream
from sections import SectionContext
from template_config import is_enabled

logger = logging.getLogger(__name__)

TITLE_HEIGHT = 9 * mm
HEADER_ROW_HEIGHT = 8 * mm
ROW_HEIGHT = 10 * mm
AFTER_TABLE_GAP = 5 * mm
CELL_PADDING = 2 * mm

# Relative widths; the enabled columns share the content width in these proportions
_COLUMN_WEIGHTS = {
    "description": 50,
    "quantity": 12,
    "unit_price": 19,
    "amount": 19,
    "notes": 24,
}
_NUMERIC = ("quantity", "unit_price", "amount")


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    x: float
    width: float
    align: str = "left"

    @property
    def text_x(self) -> float:
        if self.align == "right":
            return self.x + self.width - CELL_PADDING
        return self.x + CELL_PADDING

    @property
    def text_width(self) -> float:
        return max(1.0, self.width - 2 * CELL_PADDING)


@dataclass
class TableStats:
    rows_placed: int = 0
    header_rows: int = 0
    first_page: int = 1
    last_page: int = 1
    hidden_rows: int = 0


def visible_columns(ctx: SectionContext) -> list[str]:
    """Column keys in display order after applying item_details, item_notes and showColumns."""
    cfg = ctx.config
    keys = ["description"]
    if is_enabled(cfg, "item_details"):
        keys += [k for k in ("quantity", "unit_price") if cfg.column_enabled(k)]
    if cfg.column_enabled("amount"):
        keys.append("amount")
    if (
        is_enabled(cfg, "item_notes")
        and cfg.column_enabled("notes")
        and any(item.notes for item in ctx.data.line_items)
    ):
        keys.append("notes")
    return keys


def build_columns(ctx: SectionContext) -> list[Column]:
    keys = visible_columns(ctx)
    total_weight = float(sum(_COLUMN_WEIGHTS[k] for k in keys))
    x = ctx.left
    cols = []
    for k in keys:
        width = ctx.width * _COLUMN_WEIGHTS[k] / total_weight
        cols.append(Column(
            key=k,
            title=ctx.t(f"table.{k}"),
            x=x,
            width=width,
            align="right" if k in _NUMERIC else "left",
        ))
        x += width
    return cols


class TableLayoutEngine:
    def __init__(self, ctx: SectionContext):
        self.ctx = ctx
        self.columns = build_columns(ctx)
        self.style = ctx.config.table_style

    # -----------------------------
    # Blocks
    # -----------------------------
    def title_block(self) -> Block:
        ctx = self.ctx
        cmd = ctx.text(ctx.left, 6 * mm, ctx.t("table.title"), bold=True, size=12, color=ctx.config.color_primary)
        return Block(TITLE_HEIGHT, (cmd,), "table-title")

    def header_block(self) -> Block:
        ctx = self.ctx
        cmds = []
        if self.style == "minimal":
            cmds.append(LineCommand(ctx.left, HEADER_ROW_HEIGHT, ctx.right, HEADER_ROW_HEIGHT,
                                    ctx.config.color_primary, 1.0))
        else:
            cmds.append(RectCommand(ctx.left, 0, ctx.width, HEADER_ROW_HEIGHT, fill=HEADER_BG,
                                    stroke=RULE_DARK if self.style == "bordered" else None, line_width=0.5))
        for col in self.columns:
            cmds.append(ctx.text(col.text_x, 5.5 * mm, col.title, bold=True, size=10,
                                 color=ctx.config.color_primary, align=col.align, max_width=col.text_width))
        return Block(HEADER_ROW_HEIGHT, tuple(cmds), "table-header")

    def cell_text(self, item: LineItem, key: str) -> str:
        fmt = self.ctx.fmt
        if key == "description":
            return item.description
        if key == "quantity":
            return fmt.format_quantity(item.quantity)
        if key == "unit_price":
            return fmt.format_currency(item.unit_price)
        if key == "amount":
            return fmt.format_currency(item.amount)
        return item.notes or ""

    def row_block(self, item: LineItem, index: int) -> Block:
        ctx = self.ctx
        cmds = []
        if self.style == "striped" and index % 2 == 1:
            cmds.append(RectCommand(ctx.left, 0, ctx.width, ROW_HEIGHT, fill=ROW_ALT_BG))
        elif self.style == "bordered":
            for col in self.columns:
                cmds.append(RectCommand(col.x, 0, col.width, ROW_HEIGHT, stroke=RULE_DARK, line_width=0.5))
        else:
            cmds.append(LineCommand(ctx.left, ROW_HEIGHT, ctx.right, ROW_HEIGHT, RULE, 0.5))

        for col in self.columns:
            cmds.append(ctx.text(col.text_x, 6.5 * mm, self.cell_text(item, col.key), size=9, color=TEXT,
                                 align=col.align, max_width=col.text_width))
        return Block(ROW_HEIGHT, tuple(cmds), "table-row")

    def more_items_block(self, count: int) -> Block:
        ctx = self.ctx
        cmd = ctx.text(ctx.left + CELL_PADDING, 5 * mm, ctx.t("table.more_items", count=count), size=9,
                       color=ctx.config.color_secondary)
        return Block(7 * mm, (cmd,), "table-more")

    def end_block(self) -> Block:
        ctx = self.ctx
        line = LineCommand(ctx.left, 0, ctx.right, 0, RULE_DARK, 0.75)
        return Block(0.0, (line,), "table-end")

    # -----------------------------
    # Placement
    # -----------------------------
    def layout(self, stream: PageStream) -> TableStats:
        """Place title, header and every row, repeating the header after each break."""
        items = self.ctx.data.line_items
        stats = TableStats()

        opening = TITLE_HEIGHT + HEADER_ROW_HEIGHT + (ROW_HEIGHT if items else 0)
        if not stream.fits(opening):
            stream.new_page()
        stats.first_page = stream.page.number

        stream.place(self.title_block())
        stream.place(self.header_block())
        stats.header_rows += 1

        for i, item in enumerate(items):
            if not stream.fits(ROW_HEIGHT):
                stream.new_page()
                stream.place(self.header_block())
                stats.header_rows += 1
            stream.place(self.row_block(item, i))
            stats.rows_placed += 1

        stream.place(self.end_block())
        stream.advance(AFTER_TABLE_GAP)
        stats.last_page = stream.page.number
        logger.debug("Table: %d rows over pages %d-%d", stats.rows_placed, stats.first_page, stats.last_page)
        return stats

    def layout_single_page(self, stream: PageStream, reserve: float = 0.0) -> TableStats:
        """
        Preview layout: rows that don't fit above `reserve` are left out and
        summarized in a '+ N more items' line. Never starts a new page.
        """
        items = self.ctx.data.line_items
        stats = TableStats()
        more_h = self.more_items_block(0).height

        if not stream.fits(TITLE_HEIGHT + HEADER_ROW_HEIGHT):
            stats.header_rows = 0
            stats.hidden_rows = len(items)
            return stats

        stream.place(self.title_block())
        stream.place(self.header_block())
        stats.header_rows = 1

        for i, item in enumerate(items):
            left_after = len(items) - i - 1
            need = ROW_HEIGHT + reserve + (more_h if left_after else 0)
            if not stream.fits(need):
                break
            stream.place(self.row_block(item, i))
            stats.rows_placed += 1

        stats.hidden_rows = len(items) - stats.rows_placed
        if stats.hidden_rows and stream.fits(more_h):
            stream.place(self.more_items_block(stats.hidden_rows))
        stream.place(self.end_block())
        stream.advance(AFTER_TABLE_GAP)
        return stats
