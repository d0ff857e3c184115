# pdf_writer.py
"""
Writes laid-out pages to a PDF with the ReportLab canvas.

Layout works top-down; the canvas origin is bottom-left, so every y is
flipped here and nowhere else.
"""
from __future__ import annotations

import io
import logging

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from draw import ImageCommand, LineCommand, RectCommand, TextCommand
from page_stream import PageStream

logger = logging.getLogger(__name__)


def _draw_text(pdf: canvas.Canvas, cmd: TextCommand, page_h: float) -> None:
    if not cmd.text:
        return
    pdf.setFont(cmd.font, cmd.size)
    pdf.setFillColor(colors.HexColor(cmd.color))
    y = page_h - cmd.y
    if cmd.align == "right":
        pdf.drawRightString(cmd.x, y, cmd.text)
    elif cmd.align == "center":
        pdf.drawCentredString(cmd.x, y, cmd.text)
    else:
        pdf.drawString(cmd.x, y, cmd.text)


def _draw_rect(pdf: canvas.Canvas, cmd: RectCommand, page_h: float) -> None:
    has_fill = cmd.fill is not None
    has_stroke = cmd.stroke is not None
    if not (has_fill or has_stroke):
        return
    if has_fill:
        pdf.setFillColor(colors.HexColor(cmd.fill))
    if has_stroke:
        pdf.setStrokeColor(colors.HexColor(cmd.stroke))
        pdf.setLineWidth(cmd.line_width)
    y = page_h - cmd.y - cmd.height
    if cmd.radius > 0:
        pdf.roundRect(cmd.x, y, cmd.width, cmd.height, cmd.radius,
                      stroke=1 if has_stroke else 0, fill=1 if has_fill else 0)
    else:
        pdf.rect(cmd.x, y, cmd.width, cmd.height, stroke=1 if has_stroke else 0, fill=1 if has_fill else 0)


def _draw_line(pdf: canvas.Canvas, cmd: LineCommand, page_h: float) -> None:
    pdf.setStrokeColor(colors.HexColor(cmd.color))
    pdf.setLineWidth(cmd.width)
    pdf.line(cmd.x1, page_h - cmd.y1, cmd.x2, page_h - cmd.y2)


def _draw_image(pdf: canvas.Canvas, cmd: ImageCommand, page_h: float) -> None:
    pdf.drawImage(
        cmd.image.reader(),
        cmd.x,
        page_h - cmd.y - cmd.height,
        width=cmd.width,
        height=cmd.height,
        mask="auto",
    )


_DRAWERS = {
    TextCommand: _draw_text,
    RectCommand: _draw_rect,
    LineCommand: _draw_line,
    ImageCommand: _draw_image,
}


def write_pdf(stream: PageStream, *, title: str = "", author: str = "", subject: str = "") -> bytes:
    """
    Render every page of `stream` and return the PDF bytes.

    invariant=1 pins the creation date and document id so the same pages
    always produce the same bytes.
    """
    geo = stream.geometry
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(geo.page_width, geo.page_height), invariant=1)
    if title:
        pdf.setTitle(title)
    if author:
        pdf.setAuthor(author)
    if subject:
        pdf.setSubject(subject)

    for page in stream.pages:
        for cmd in page.commands:
            _DRAWERS[type(cmd)](pdf, cmd, geo.page_height)
        pdf.showPage()

    pdf.save()
    data = buf.getvalue()
    logger.debug("Wrote %d page(s), %d bytes", len(stream.pages), len(data))
    return data
