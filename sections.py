# sections.py
"""
Section blocks for estimates and invoices.

Each block function takes a SectionContext and returns a Block whose command
coordinates are relative to the block's top-left corner of the page column.
Blocks switched off by the template return EMPTY_BLOCK, never blank space.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from reportlab.lib.units import mm

from documents import (
    DocumentData,
    DocumentStatus,
    IN_PROGRESS_STATUSES,
    NEGATIVE_STATUSES,
    POSITIVE_STATUSES,
)
from draw import (
    AMBER, EMPTY_BLOCK, ERROR_RED, GREEN, HEADER_BG, RED, RULE, RULE_DARK,
    TEXT, TEXT_MUTED, TEXT_SOFT, WHITE,
    Block, ImageCommand, LineCommand, RectCommand, TextCommand,
)
from formatting import Formatter
from images import AssetError, EmbedResult, EmbeddedImage
from page_stream import PageGeometry
from template_config import ResolvedConfig, is_enabled
from text_fit import ELLIPSIS, truncate_text, wrap_paragraphs, wrap_text
from totals import TotalsBreakdown
from translations import Translator

HEADER_HEIGHTS = {
    "simple": 22 * mm,
    "gradient": 28 * mm,
    "boxed": 28 * mm,
}
LOGO_BOX = (40 * mm, 20 * mm)
SIGNATURE_BOX = (60 * mm, 30 * mm)

PARTY_LINE = 5 * mm
META_LINE = 6 * mm
META_VALUE_OFFSET = 38 * mm
TOTALS_LINE = 7 * mm
TOTALS_COLUMN = 75 * mm
TEXT_LINE = 4.5 * mm
SECTION_TITLE = 8 * mm
SECTION_GAP = 6 * mm
DESCRIPTION_PAD = META_LINE - TEXT_LINE
PREVIEW_DESCRIPTION_LINES = 3


@dataclass(frozen=True)
class SectionContext:
    data: DocumentData
    config: ResolvedConfig
    fmt: Formatter
    t: Translator
    geometry: PageGeometry
    totals: TotalsBreakdown
    logo: Optional[EmbedResult] = None
    signature: Optional[EmbedResult] = None

    @property
    def left(self) -> float:
        return self.geometry.content_left

    @property
    def right(self) -> float:
        return self.geometry.content_right

    @property
    def width(self) -> float:
        return self.geometry.content_width

    def text(self, x, y, text, *, bold=False, size=10, color=TEXT, align="left", max_width=None) -> TextCommand:
        font = self.config.font_bold if bold else self.config.font_regular
        value = str(text)
        if max_width is not None:
            value = truncate_text(value, font, size, max_width)
        return TextCommand(x, y, value, font, size, color, align)


def status_label(t: Translator, status) -> str:
    key = status.value if isinstance(status, DocumentStatus) else str(status or "")
    label_key = f"status.{key}"
    return t(label_key) if t.has(label_key) else key.replace("_", " ").title()


def status_color(config: ResolvedConfig, status) -> str:
    if status in POSITIVE_STATUSES:
        return GREEN
    if status in NEGATIVE_STATUSES:
        return RED
    if status in IN_PROGRESS_STATUSES:
        return AMBER
    return config.color_primary


def city_line(city: Optional[str], state: Optional[str], zip_code: Optional[str]) -> str:
    if not (city and state):
        return ""
    return f"{city}, {state} {zip_code or ''}".strip()


# -----------------------------
# Header
# -----------------------------
def header_block(ctx: SectionContext) -> Block:
    """Title and number always; style background and logo only when the header is enabled."""
    cfg = ctx.config
    styled = is_enabled(cfg, "header")
    style = cfg.header_style if styled else "simple"
    height = HEADER_HEIGHTS[style]
    cmds = []

    if styled and style == "gradient":
        # light band from the paper edge down through the header
        cmds.append(RectCommand(0, -ctx.geometry.margin, ctx.geometry.page_width,
                                ctx.geometry.margin + height - 4 * mm, fill=HEADER_BG))
    elif styled and style == "boxed":
        cmds.append(RectCommand(ctx.left - 5 * mm, -5 * mm, ctx.width + 10 * mm, height - 1 * mm,
                                stroke=cfg.color_primary, line_width=1.4))

    kind_title = ctx.t(f"kind.{ctx.data.kind.value}")
    cmds.append(ctx.text(ctx.left, 8 * mm, kind_title, bold=True, size=22, color=cfg.color_primary))
    cmds.append(ctx.text(ctx.left, 16 * mm, f"#{ctx.data.number}", bold=True, size=14,
                         color=cfg.color_primary, max_width=ctx.width / 2))

    if styled and is_enabled(cfg, "logo") and ctx.logo is not None:
        if isinstance(ctx.logo, EmbeddedImage):
            w, h = ctx.logo.fit(*LOGO_BOX)
            cmds.append(ImageCommand(ctx.right - w, 0, w, h, ctx.logo))
        else:
            # unreadable logo: the business name stands in for it
            cmds.append(ctx.text(ctx.right, 8 * mm, ctx.data.issuer.business_name, bold=True, size=12,
                                 color=cfg.color_primary, align="right", max_width=LOGO_BOX[0] * 1.5))

    return Block(height, tuple(cmds), "header")


# -----------------------------
# Parties (client left, contractor right)
# -----------------------------
def _party_lines(ctx: SectionContext) -> list[tuple[str, bool, float]]:
    party = ctx.data.party
    lines = [(ctx.t("parties.client"), True, 12)]
    if party.display_name:
        lines.append((party.display_name, False, 11))
    if party.email:
        lines.append((ctx.t("parties.email", value=party.email), False, 10))
    if party.phone:
        lines.append((ctx.t("parties.phone", value=party.phone), False, 10))
    if party.address:
        lines.append((party.address, False, 10))
        line = city_line(party.city, party.state, party.zip_code)
        if line:
            lines.append((line, False, 10))
    return lines


def _issuer_lines(ctx: SectionContext) -> list[tuple[str, bool, float]]:
    issuer = ctx.data.issuer
    lines = [(issuer.business_name, True, 12)]
    if issuer.address:
        lines.append((issuer.address, False, 10))
    line = city_line(issuer.city, issuer.state, issuer.zip_code)
    if line:
        lines.append((line, False, 10))
    if issuer.phone:
        lines.append((ctx.t("parties.phone", value=issuer.phone), False, 10))
    if issuer.email:
        lines.append((ctx.t("parties.email", value=issuer.email), False, 10))
    return lines


def parties_block(ctx: SectionContext) -> Block:
    column_w = ctx.width / 2 - 4 * mm
    cmds = []

    def column(lines, x, align):
        y = 5 * mm
        for i, (text, bold, size) in enumerate(lines):
            color = ctx.config.color_primary if (bold and i == 0 and align == "left") else TEXT_SOFT
            cmds.append(ctx.text(x, y, text, bold=bold, size=size, color=color, align=align, max_width=column_w))
            y += (8 * mm) if i == 0 and align == "left" else PARTY_LINE
        return y

    left_bottom = 0.0
    if is_enabled(ctx.config, "client_details"):
        left_bottom = column(_party_lines(ctx), ctx.left, "left")
    right_bottom = column(_issuer_lines(ctx), ctx.right, "right")

    height = max(left_bottom, right_bottom) + 2 * mm
    cmds.append(LineCommand(ctx.left, height - 1 * mm, ctx.right, height - 1 * mm, RULE))
    return Block(height + 4 * mm, tuple(cmds), "parties")


# -----------------------------
# Document meta (status, dates, project)
# -----------------------------
def project_description_lines(ctx: SectionContext) -> list[str]:
    project = ctx.data.project
    if not (project and project.description and is_enabled(ctx.config, "project_details")):
        return []
    return wrap_text(project.description, ctx.config.font_regular, 9, ctx.width - META_VALUE_OFFSET)


def clip_lines(ctx: SectionContext, lines: list[str], limit: int) -> list[str]:
    """First `limit` lines; the last one ends with an ellipsis when lines were dropped."""
    if len(lines) <= limit:
        return list(lines)
    kept = list(lines[:limit])
    kept[-1] = truncate_text(f"{kept[-1]}{ELLIPSIS}", ctx.config.font_regular, 9, ctx.width - META_VALUE_OFFSET)
    return kept


def meta_block(ctx: SectionContext, description_lines: Optional[list[str]] = None, *, closed: bool = True) -> Block:
    """
    Status, dates, payment method and project.

    `description_lines` defaults to the whole wrapped project description.
    With closed=False the closing rule is left out so more description lines
    can follow (see description_line_block and meta_rule_block).
    """
    data, cfg = ctx.data, ctx.config
    value_x = ctx.left + META_VALUE_OFFSET
    value_w = ctx.width - META_VALUE_OFFSET
    cmds = [ctx.text(ctx.left, 5 * mm, ctx.t(f"meta.title.{data.kind.value}"), bold=True, size=12,
                     color=cfg.color_primary)]
    y = 11 * mm

    def row(label: str, value: str, color: str = TEXT_SOFT):
        nonlocal y
        cmds.append(ctx.text(ctx.left, y, label, bold=True, size=10, color=TEXT_SOFT))
        cmds.append(ctx.text(value_x, y, value, size=10, color=color, max_width=value_w))
        y += META_LINE

    row(ctx.t("meta.status"), status_label(ctx.t, data.status), status_color(cfg, data.status))

    if is_enabled(cfg, "dates"):
        row(ctx.t("meta.issue_date"), ctx.fmt.format_date(data.issue_date))
        if data.due_or_expiry_date:
            label = "meta.due_date" if data.is_invoice else "meta.valid_until"
            row(ctx.t(label), ctx.fmt.format_date(data.due_or_expiry_date))

    if data.is_invoice and data.payment_method:
        row(ctx.t("meta.payment_method"), data.payment_method)

    if data.project and is_enabled(cfg, "project_details"):
        row(ctx.t("meta.project"), data.project.title)

    lines = project_description_lines(ctx) if description_lines is None else list(description_lines)
    if lines:
        cmds.append(ctx.text(ctx.left, y, ctx.t("meta.project_details"), bold=True, size=10, color=TEXT_SOFT))
        for ln in lines:
            cmds.append(ctx.text(value_x, y, ln, size=9, color=TEXT_SOFT, max_width=value_w))
            y += TEXT_LINE

    if not closed:
        return Block(y, tuple(cmds), "meta")
    pad = DESCRIPTION_PAD if lines else 0.0
    rule = meta_rule_block(ctx, pad)
    return Block(y + rule.height, tuple(cmds) + tuple(c.shifted(y) for c in rule.commands), "meta")


def description_line_block(ctx: SectionContext, line: str, first_on_page: bool = False) -> Block:
    """One more project description line, in the meta value column."""
    top = 3.5 * mm if first_on_page else 0.0
    cmd = ctx.text(ctx.left + META_VALUE_OFFSET, top, line, size=9, color=TEXT_SOFT,
                   max_width=ctx.width - META_VALUE_OFFSET)
    return Block(top + TEXT_LINE, (cmd,), "meta-description")


def meta_rule_block(ctx: SectionContext, pad: float = 0.0) -> Block:
    return Block(pad + SECTION_GAP, (LineCommand(ctx.left, pad, ctx.right, pad, RULE),), "meta-rule")


# -----------------------------
# Totals
# -----------------------------
def totals_block(ctx: SectionContext) -> Block:
    """
    Subtotal and TOTAL always. Tax/discount only for rates above zero.
    Paid/Balance Due only on invoices with a nonzero amount paid.
    """
    totals, fmt, cfg = ctx.totals, ctx.fmt, ctx.config
    label_x = ctx.right - TOTALS_COLUMN
    cmds = []
    y = 5 * mm

    def line(label, value, *, bold_value=True, color=TEXT, size=10, label_bold=False):
        nonlocal y
        cmds.append(ctx.text(label_x, y, label, bold=label_bold, size=size, color=color if label_bold else TEXT))
        cmds.append(ctx.text(ctx.right, y, value, bold=bold_value, size=size, color=color, align="right"))
        y += TOTALS_LINE

    line(ctx.t("totals.subtotal"), fmt.format_currency(totals.subtotal))
    if totals.show_tax:
        line(ctx.t("totals.tax", rate=fmt.format_percent(totals.tax_rate)), fmt.format_currency(totals.tax_amount))
    if totals.show_discount:
        line(ctx.t("totals.discount", rate=fmt.format_percent(totals.discount_rate)),
             fmt.format_currency(-totals.discount_amount))

    rule_y = y - TOTALS_LINE + 2.5 * mm
    cmds.append(LineCommand(label_x, rule_y, ctx.right, rule_y, RULE_DARK))
    y += 1 * mm
    line(ctx.t("totals.total"), fmt.format_currency(totals.total), color=cfg.color_primary, size=11, label_bold=True)

    if totals.show_payment:
        line(ctx.t("totals.paid"), fmt.format_currency(totals.amount_paid), color=GREEN)
        balance_color = GREEN if totals.is_settled else RED
        line(ctx.t("totals.balance_due"), fmt.format_currency(totals.balance_due), color=balance_color,
             label_bold=True)

    return Block(y + SECTION_GAP, tuple(cmds), "totals")


# -----------------------------
# Signature
# -----------------------------
def signature_block(ctx: SectionContext, signed_on: Optional[date] = None) -> Block:
    cfg = ctx.config
    if not is_enabled(cfg, "signature_line"):
        return EMPTY_BLOCK

    if ctx.data.is_invoice and ctx.signature is not None:
        cmds = [ctx.text(ctx.left, 5 * mm, ctx.t("signature.client_title"), bold=True, size=11,
                         color=cfg.color_primary)]
        y = 9 * mm
        if isinstance(ctx.signature, EmbeddedImage):
            w, h = ctx.signature.fit(*SIGNATURE_BOX)
            cmds.append(ImageCommand(ctx.left, y, w, h, ctx.signature))
            y += SIGNATURE_BOX[1] + 5 * mm
            signed = signed_on or ctx.data.signed_on
            if signed:
                cmds.append(ctx.text(ctx.left, y, ctx.t("signature.date", date=ctx.fmt.format_date(signed)),
                                     size=9, color=TEXT_SOFT))
                y += 5 * mm
        elif isinstance(ctx.signature, AssetError):
            y += 4 * mm
            cmds.append(ctx.text(ctx.left, y, ctx.t("signature.error"), size=9, color=ERROR_RED))
            y += 5 * mm
        return Block(y + SECTION_GAP, tuple(cmds), "signature")

    line_y = 12 * mm
    cmds = [
        LineCommand(ctx.left, line_y, ctx.left + 70 * mm, line_y, "#C8C8C8", 0.75),
        ctx.text(ctx.left, line_y + 4 * mm, ctx.t("signature.line_caption"), size=8, color=TEXT_MUTED),
    ]
    return Block(line_y + 4 * mm + SECTION_GAP, tuple(cmds), "signature")


# -----------------------------
# Terms / Notes (line-level pieces; the assembler paginates them)
# -----------------------------
@dataclass(frozen=True)
class TextSection:
    title: str
    lines: tuple[str, ...]


def _text_section(ctx: SectionContext, feature: str, title_key: str, body: Optional[str]) -> Optional[TextSection]:
    if not body or not is_enabled(ctx.config, feature):
        return None
    lines = wrap_paragraphs(body, ctx.config.font_regular, 9, ctx.width)
    if not lines:
        return None
    return TextSection(ctx.t(title_key), tuple(lines))


def terms_section(ctx: SectionContext) -> Optional[TextSection]:
    return _text_section(ctx, "terms", "terms.title", ctx.data.terms)


def notes_section(ctx: SectionContext) -> Optional[TextSection]:
    return _text_section(ctx, "notes", "notes.title", ctx.data.notes)


def section_title_block(ctx: SectionContext, title: str, first_line: Optional[str] = None) -> Block:
    """Title plus its first line, so a title never ends a page alone."""
    cmds = [ctx.text(ctx.left, 5 * mm, title, bold=True, size=11, color=ctx.config.color_primary)]
    height = SECTION_TITLE
    if first_line is not None:
        cmds.append(ctx.text(ctx.left, height + 3.5 * mm, first_line, size=9, color=TEXT_SOFT))
        height += TEXT_LINE
    return Block(height, tuple(cmds), "section-title")


def text_line_block(ctx: SectionContext, line: str) -> Block:
    return Block(TEXT_LINE, (ctx.text(ctx.left, 3.5 * mm, line, size=9, color=TEXT_SOFT),), "text-line")


def section_gap_block() -> Block:
    return Block(SECTION_GAP, (), "gap")


# -----------------------------
# Footer (stamped on every page once the page count is known)
# -----------------------------
def footer_commands(
    ctx: SectionContext,
    page_number: int,
    page_count: int,
    generated_on: Optional[date] = None,
) -> list:
    if not is_enabled(ctx.config, "footer"):
        return []
    geo = ctx.geometry
    band_h = 15 * mm
    band_top = geo.page_height - band_h
    baseline = band_top + 8 * mm
    issuer = ctx.data.issuer

    parts = [ctx.t("footer.thanks"), issuer.business_name]
    if issuer.phone:
        parts.append(issuer.phone)
    cmds = [
        RectCommand(0, band_top, geo.page_width, band_h, fill=ctx.config.color_primary),
        ctx.text(geo.page_width / 2, baseline, " | ".join(parts), size=8, color=WHITE, align="center",
                 max_width=geo.content_width * 0.7),
        ctx.text(ctx.right, baseline, ctx.t("footer.page", page=page_number, pages=page_count),
                 size=8, color=WHITE, align="right"),
    ]
    if generated_on is not None:
        cmds.append(ctx.text(ctx.left, band_top + 12.5 * mm,
                             ctx.t("footer.generated", date=ctx.fmt.format_date(generated_on),
                                   business=issuer.business_name),
                             size=7, color=WHITE, max_width=geo.content_width))
    return cmds
