# pdf_service.py
"""Render entry points: full documents, one-page previews and download names."""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from documents import DocumentData, DocumentKind, check_required_fields
from formatting import Formatter
from images import AssetError, embed_image
from page_stream import LayoutError, PageGeometry, PageStream
from pdf_writer import write_pdf
from sections import (
    DESCRIPTION_PAD,
    PREVIEW_DESCRIPTION_LINES,
    SECTION_GAP,
    TEXT_LINE,
    SectionContext,
    TextSection,
    clip_lines,
    description_line_block,
    footer_commands,
    header_block,
    meta_block,
    meta_rule_block,
    notes_section,
    parties_block,
    project_description_lines,
    section_title_block,
    signature_block,
    terms_section,
    text_line_block,
    totals_block,
)
from table_layout import TableLayoutEngine
from template_config import is_enabled, resolve
from totals import TotalsDiscrepancy, calculate_totals, validate_totals
from translations import Translator, get_translator

logger = logging.getLogger(__name__)


class RenderStatus(str, enum.Enum):
    SUCCESS = "success"
    SUCCESS_WITH_WARNINGS = "success_with_warnings"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderWarning:
    category: str  # asset | totals
    message: str

    def __str__(self) -> str:
        return f"[{self.category}] {self.message}"


@dataclass
class RenderResult:
    status: RenderStatus
    pdf_bytes: bytes = b""
    page_count: int = 0
    warnings: list[RenderWarning] = field(default_factory=list)
    discrepancies: list[TotalsDiscrepancy] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    pages: list = field(default_factory=list, repr=False)

    @property
    def ok(self) -> bool:
        return self.status != RenderStatus.FAILED


def _safe_filename(name: str) -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip()


def document_filename(kind, number: str, translator: Optional[Translator] = None) -> str:
    """Estimate_<number>.pdf / Invoice_<number>.pdf, with the label in the translator's language."""
    t = translator or get_translator()
    kind_value = kind.value if isinstance(kind, DocumentKind) else str(kind or "estimate").lower()
    label = t(f"file.{kind_value}")
    stem = _safe_filename(f"{label}_{number}") or label
    return f"{stem}.pdf"


def _failed(errors: list[str]) -> RenderResult:
    for e in errors:
        logger.warning("Render failed: %s", e)
    return RenderResult(status=RenderStatus.FAILED, errors=list(errors))


def _prepare(data: DocumentData, config, formatter, translator, geometry):
    """Shared setup for render() and render_preview(): config, totals, assets."""
    resolved = resolve(config)
    fmt = formatter or Formatter(translator=translator)
    t = translator or fmt.translator
    geo = geometry or PageGeometry()

    discrepancies = validate_totals(data)
    warnings = [RenderWarning("totals", str(d)) for d in discrepancies]

    logo = None
    if is_enabled(resolved, "header") and is_enabled(resolved, "logo") and data.issuer.logo:
        logo = embed_image(data.issuer.logo, "logo")

    signature = None
    if data.is_invoice and is_enabled(resolved, "signature_line") and data.signature_image:
        signature = embed_image(data.signature_image, "signature")

    for asset in (logo, signature):
        if isinstance(asset, AssetError):
            warnings.append(RenderWarning("asset", str(asset)))

    ctx = SectionContext(
        data=data,
        config=resolved,
        fmt=fmt,
        t=t,
        geometry=geo,
        totals=calculate_totals(data),
        logo=logo,
        signature=signature,
    )
    return ctx, warnings, discrepancies


def _place_meta(stream: PageStream, ctx: SectionContext) -> None:
    lines = project_description_lines(ctx)
    if len(lines) <= 1:
        stream.place(meta_block(ctx, lines))
        return
    stream.place(meta_block(ctx, lines[:1], closed=False))
    for line in lines[1:]:
        first_on_page = not stream.fits(TEXT_LINE)
        if first_on_page:
            stream.new_page()
        stream.place(description_line_block(ctx, line, first_on_page))
    stream.place(meta_rule_block(ctx, DESCRIPTION_PAD))


def _place_text_section(stream: PageStream, ctx: SectionContext, section: TextSection) -> None:
    stream.place(section_title_block(ctx, section.title, section.lines[0]))
    for line in section.lines[1:]:
        if not stream.fits(TEXT_LINE):
            stream.new_page()
            stream.place(section_title_block(ctx, ctx.t("section.continued", title=section.title)))
        stream.place(text_line_block(ctx, line))
    stream.advance(SECTION_GAP)


def _stamp_footers(stream: PageStream, ctx: SectionContext, generated_on: Optional[date]) -> None:
    total = stream.page_count
    for page in stream.pages:
        stream.stamp(page, footer_commands(ctx, page.number, total, generated_on))


def _finish(stream: PageStream, ctx: SectionContext, warnings, discrepancies) -> RenderResult:
    data = ctx.data
    pdf_bytes = write_pdf(
        stream,
        title=f"{ctx.t(f'kind.{data.kind.value}')} - {data.number}",
        author=data.issuer.business_name,
    )
    status = RenderStatus.SUCCESS_WITH_WARNINGS if warnings else RenderStatus.SUCCESS
    return RenderResult(
        status=status,
        pdf_bytes=pdf_bytes,
        page_count=stream.page_count,
        warnings=list(warnings),
        discrepancies=list(discrepancies),
        pages=stream.pages,
    )


def render(
    data: DocumentData,
    config=None,
    *,
    formatter: Optional[Formatter] = None,
    translator: Optional[Translator] = None,
    geometry: Optional[PageGeometry] = None,
    generated_on: Optional[date] = None,
) -> RenderResult:
    """
    Lay out and write one estimate or invoice.

    Sections go down the page in a fixed order: header, parties, meta, line
    items, totals, signature, terms, notes. The footer is stamped on every
    page last, once the page count is known. Data problems give a FAILED
    result; unreadable images and totals mismatches only add warnings.
    """
    problems = check_required_fields(data)
    if problems:
        return _failed(problems)

    ctx, warnings, discrepancies = _prepare(data, config, formatter, translator, geometry)
    stream = PageStream(ctx.geometry)

    try:
        stream.place(header_block(ctx))
        stream.place(parties_block(ctx))
        _place_meta(stream, ctx)
        TableLayoutEngine(ctx).layout(stream)
        stream.place(totals_block(ctx))
        stream.place(signature_block(ctx))
        for section in (terms_section(ctx), notes_section(ctx)):
            if section is not None:
                _place_text_section(stream, ctx, section)
    except LayoutError as e:
        return _failed([str(e)])

    _stamp_footers(stream, ctx, generated_on)
    result = _finish(stream, ctx, warnings, discrepancies)
    logger.info(
        "Rendered %s %s: %d page(s), %s",
        data.kind.value, data.number, result.page_count, result.status.value,
    )
    return result


def render_preview(
    data: DocumentData,
    config=None,
    *,
    formatter: Optional[Formatter] = None,
    translator: Optional[Translator] = None,
    geometry: Optional[PageGeometry] = None,
) -> RenderResult:
    """
    Single-page rendering for quick previews.

    Uses the same blocks, formatter and totals as render(). The project
    description is clipped to a few lines so the meta block keeps a fixed
    height. Line items that don't fit are summarized as "+ N more items";
    trailing sections that don't fit are left out.
    """
    problems = check_required_fields(data)
    if problems:
        return _failed(problems)

    ctx, warnings, discrepancies = _prepare(data, config, formatter, translator, geometry)
    stream = PageStream(ctx.geometry)

    def place_if_fits(block) -> bool:
        if block.is_empty or not stream.fits(block.height):
            return False
        stream.place(block)
        return True

    description = clip_lines(ctx, project_description_lines(ctx), PREVIEW_DESCRIPTION_LINES)
    try:
        stream.place(header_block(ctx))
        stream.place(parties_block(ctx))
        stream.place(meta_block(ctx, description))
    except LayoutError as e:
        return _failed([str(e)])
    if stream.page_count > 1:
        return _failed(["header, parties and meta don't fit on one page"])

    totals = totals_block(ctx)
    TableLayoutEngine(ctx).layout_single_page(stream, reserve=totals.height)
    place_if_fits(totals)
    place_if_fits(signature_block(ctx))

    for section in (terms_section(ctx), notes_section(ctx)):
        if section is None:
            continue
        if not stream.fits(section_title_block(ctx, section.title, section.lines[0]).height
                           + TEXT_LINE * (len(section.lines) - 1)):
            continue
        _place_text_section(stream, ctx, section)

    _stamp_footers(stream, ctx, None)
    return _finish(stream, ctx, warnings, discrepancies)
