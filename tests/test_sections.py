"""
Tests for sections module (header, parties, meta, totals, signature, footer).
"""

from datetime import date
from decimal import Decimal

import pytest

from documents import DocumentKind, DocumentStatus, Party, ProjectReference
from draw import GREEN, RED, AMBER, ERROR_RED, ImageCommand, LineCommand, RectCommand, TextCommand
from images import AssetError, embed_image
from sections import (
    DESCRIPTION_PAD,
    TEXT_LINE,
    city_line,
    clip_lines,
    description_line_block,
    footer_commands,
    header_block,
    meta_block,
    meta_rule_block,
    notes_section,
    parties_block,
    signature_block,
    status_label,
    terms_section,
    totals_block,
)
from translations import get_translator


def _find(commands, text):
    return next(c for c in commands if isinstance(c, TextCommand) and c.text == text)


def _value_right_of(commands, label):
    """The right-aligned value on the same baseline as `label`."""
    lab = _find(commands, label)
    return next(
        c for c in commands
        if isinstance(c, TextCommand) and c.y == lab.y and c.align == "right"
    )


# ═══════════════════════════════════════════════════════════════════════════════
# HEADER
# ═══════════════════════════════════════════════════════════════════════════════


class TestHeader:
    """header_block variants and logo handling."""

    def test_title_and_number_always(self, make_document, make_context, texts):
        ctx = make_context(make_document(), {"showHeader": False})
        out = texts(header_block(ctx).commands)
        assert out == ["ESTIMATE", "#EST-1001"]

    def test_gradient_has_band(self, make_document, make_context):
        block = header_block(make_context(make_document()))
        assert any(isinstance(c, RectCommand) and c.fill for c in block.commands)

    def test_boxed_has_outline(self, make_document, make_context):
        block = header_block(make_context(make_document(), {"headerStyle": "boxed"}))
        rects = [c for c in block.commands if isinstance(c, RectCommand)]
        assert rects and rects[0].stroke == "#003366" and rects[0].fill is None

    def test_simple_has_no_decoration(self, make_document, make_context):
        block = header_block(make_context(make_document(), {"headerStyle": "simple"}))
        assert not any(isinstance(c, RectCommand) for c in block.commands)

    def test_logo_drawn(self, make_document, make_context, png_bytes):
        ctx = make_context(make_document(), logo=embed_image(png_bytes, "logo"))
        assert any(isinstance(c, ImageCommand) for c in header_block(ctx).commands)

    def test_logo_failure_falls_back_to_name(self, make_document, make_context, texts):
        ctx = make_context(make_document(), logo=AssetError("logo", "unreadable"))
        assert "Acme Renovations" in texts(header_block(ctx).commands)

    def test_logo_flag_off(self, make_document, make_context, png_bytes):
        ctx = make_context(make_document(), {"logo": False}, logo=embed_image(png_bytes))
        assert not any(isinstance(c, ImageCommand) for c in header_block(ctx).commands)

    def test_spanish_title(self, make_document, make_context, texts):
        ctx = make_context(make_document(kind=DocumentKind.INVOICE), locale="es-MX")
        assert "FACTURA" in texts(header_block(ctx).commands)


# ═══════════════════════════════════════════════════════════════════════════════
# PARTIES
# ═══════════════════════════════════════════════════════════════════════════════


class TestParties:
    """Blank fields produce no lines."""

    def test_full_party(self, make_document, make_context, texts):
        out = texts(parties_block(make_context(make_document())).commands)
        assert "CLIENT" in out
        assert "Jane Doe" in out
        assert "Email: jane@example.test" in out
        assert "Tel: 555-0199" in out
        assert "Springfield, IL 62702" in out
        assert "Acme Renovations" in out

    def test_missing_contact_means_fewer_lines(self, make_document, make_context, texts):
        full = parties_block(make_context(make_document()))
        bare = parties_block(make_context(make_document(party=Party("Jane", "Doe"))))
        assert len(texts(bare.commands)) < len(texts(full.commands))
        assert "" not in texts(bare.commands)
        assert bare.height <= full.height

    def test_client_details_off(self, make_document, make_context, texts):
        out = texts(parties_block(make_context(make_document(), {"showClientDetails": False})).commands)
        assert "CLIENT" not in out
        assert "Jane Doe" not in out
        assert "Acme Renovations" in out

    def test_city_line_needs_city_and_state(self):
        assert city_line("Springfield", "IL", "62701") == "Springfield, IL 62701"
        assert city_line("Springfield", "IL", None) == "Springfield, IL"
        assert city_line("Springfield", None, "62701") == ""

    def test_party_city_requires_address(self, make_document, make_context, texts):
        party = Party("Jane", "Doe", city="Springfield", state="IL")
        out = texts(parties_block(make_context(make_document(party=party))).commands)
        assert "Springfield, IL" not in out


# ═══════════════════════════════════════════════════════════════════════════════
# META
# ═══════════════════════════════════════════════════════════════════════════════


class TestMeta:
    """Status colors, dates and project."""

    @pytest.mark.parametrize(
        "status, color",
        [
            (DocumentStatus.PAID, GREEN),
            (DocumentStatus.ACCEPTED, GREEN),
            (DocumentStatus.OVERDUE, RED),
            (DocumentStatus.PENDING, AMBER),
            (DocumentStatus.DRAFT, "#003366"),
        ],
    )
    def test_status_color(self, make_document, make_context, status, color):
        ctx = make_context(make_document(status=status))
        cmd = _find(meta_block(ctx).commands, status_label(ctx.t, status))
        assert cmd.color == color

    def test_unknown_status_title_cased(self):
        assert status_label(get_translator(), "on_hold") == "On Hold"

    def test_dates(self, make_document, make_context, texts):
        doc = make_document(due_or_expiry_date=date(2024, 4, 4))
        out = texts(meta_block(make_context(doc)).commands)
        assert "March 5, 2024" in out
        assert "Valid until:" in out
        assert "April 4, 2024" in out

    def test_invoice_due_date_label(self, make_document, make_context, texts):
        doc = make_document(kind=DocumentKind.INVOICE, due_or_expiry_date=date(2024, 4, 4),
                            payment_method="Cash")
        out = texts(meta_block(make_context(doc)).commands)
        assert "Due date:" in out
        assert "Cash" in out

    def test_dates_off(self, make_document, make_context, texts):
        out = texts(meta_block(make_context(make_document(), {"showDates": False})).commands)
        assert "March 5, 2024" not in out

    def test_project(self, make_document, make_context, texts):
        doc = make_document(project=ProjectReference("Kitchen", "New cabinets and counters"))
        out = texts(meta_block(make_context(doc)).commands)
        assert "Kitchen" in out
        assert "New cabinets and counters" in out
        hidden = texts(meta_block(make_context(doc, {"showProjectDetails": False})).commands)
        assert "Kitchen" not in hidden

    def test_open_meta_has_no_rule(self, make_document, make_context):
        doc = make_document(project=ProjectReference("Kitchen", "New cabinets and counters"))
        ctx = make_context(doc)
        closed = meta_block(ctx)
        opened = meta_block(ctx, ["New cabinets and counters"], closed=False)
        assert any(isinstance(c, LineCommand) for c in closed.commands)
        assert not any(isinstance(c, LineCommand) for c in opened.commands)
        assert opened.height + meta_rule_block(ctx, DESCRIPTION_PAD).height == closed.height

    def test_description_line_block(self, make_document, make_context):
        ctx = make_context(make_document())
        assert description_line_block(ctx, "more").height == TEXT_LINE
        top = description_line_block(ctx, "more", first_on_page=True)
        assert top.height > TEXT_LINE
        assert top.commands[0].y > 0

    def test_clip_lines(self, make_document, make_context):
        ctx = make_context(make_document())
        lines = ["one two", "three four", "five six", "seven"]
        assert clip_lines(ctx, lines, 4) == lines
        clipped = clip_lines(ctx, lines, 2)
        assert clipped == ["one two", "three four..."]


# ═══════════════════════════════════════════════════════════════════════════════
# TOTALS
# ═══════════════════════════════════════════════════════════════════════════════


class TestTotalsBlock:
    """Which money lines show, and how."""

    def test_minimal(self, make_document, make_context, texts):
        cmds = totals_block(make_context(make_document())).commands
        out = texts(cmds)
        assert _value_right_of(cmds, "Subtotal:").text == "$500.00"
        assert _value_right_of(cmds, "TOTAL:").text == "$500.00"
        assert not any(t.startswith("Tax") or t.startswith("Discount") for t in out)
        assert "Balance Due:" not in out

    def test_tax_and_discount(self, make_document, make_context):
        doc = make_document(subtotal=Decimal("1000.00"), total=Decimal("980.00"),
                            tax_rate_percent=Decimal("8"), discount_rate_percent=Decimal("10"))
        cmds = totals_block(make_context(doc)).commands
        assert _value_right_of(cmds, "Tax (8%):").text == "$80.00"
        assert _value_right_of(cmds, "Discount (10%):").text == "-$100.00"
        assert _value_right_of(cmds, "TOTAL:").text == "$980.00"

    def test_outstanding_balance_is_red(self, make_document, make_context):
        doc = make_document(kind=DocumentKind.INVOICE, subtotal=Decimal("1200"), total=Decimal("1200.00"),
                            amount_paid=Decimal("700.00"))
        cmds = totals_block(make_context(doc)).commands
        balance = _value_right_of(cmds, "Balance Due:")
        assert balance.text == "$500.00"
        assert balance.color == RED
        assert _value_right_of(cmds, "Paid:").color == GREEN

    def test_settled_balance_is_green(self, make_document, make_context):
        doc = make_document(kind=DocumentKind.INVOICE, subtotal=Decimal("1200"), total=Decimal("1200.00"),
                            amount_paid=Decimal("1200.00"))
        balance = _value_right_of(totals_block(make_context(doc)).commands, "Balance Due:")
        assert balance.text == "$0.00"
        assert balance.color == GREEN


# ═══════════════════════════════════════════════════════════════════════════════
# SIGNATURE / TERMS / NOTES
# ═══════════════════════════════════════════════════════════════════════════════


class TestSignature:
    """Signature image, placeholder and blank line."""

    def test_blank_line_for_estimate(self, make_document, make_context, texts):
        out = texts(signature_block(make_context(make_document())).commands)
        assert out == ["CUSTOMER SIGNATURE"]

    def test_disabled(self, make_document, make_context):
        block = signature_block(make_context(make_document(), {"showSignatureLine": False}))
        assert block.is_empty

    def test_invoice_image(self, make_document, make_context, png_bytes, texts):
        doc = make_document(kind=DocumentKind.INVOICE, signature_image=png_bytes, signed_on=date(2024, 3, 9))
        block = signature_block(make_context(doc, signature=embed_image(png_bytes)))
        assert any(isinstance(c, ImageCommand) for c in block.commands)
        assert "Signature date: March 9, 2024" in texts(block.commands)

    def test_invoice_bad_image_placeholder(self, make_document, make_context):
        doc = make_document(kind=DocumentKind.INVOICE, signature_image="broken")
        block = signature_block(make_context(doc, signature=AssetError("signature", "bad")))
        placeholder = _find(block.commands, "Error loading client signature")
        assert placeholder.color == ERROR_RED


class TestTextSections:
    """Terms and notes gating."""

    def test_terms_present(self, make_document, make_context):
        section = terms_section(make_context(make_document(terms="Net 30.")))
        assert section.title == "TERMS AND CONDITIONS"
        assert section.lines == ("Net 30.",)

    def test_terms_off_or_empty(self, make_document, make_context):
        assert terms_section(make_context(make_document(terms="Net 30."), {"showTerms": False})) is None
        assert terms_section(make_context(make_document())) is None

    def test_notes(self, make_document, make_context):
        section = notes_section(make_context(make_document(notes="Bring keys.\n\nGate code 1234.")))
        assert section.lines == ("Bring keys.", "", "Gate code 1234.")


# ═══════════════════════════════════════════════════════════════════════════════
# FOOTER
# ═══════════════════════════════════════════════════════════════════════════════


class TestFooter:
    """footer_commands per page."""

    def test_page_label_and_thanks(self, make_document, make_context, texts):
        out = texts(footer_commands(make_context(make_document()), 2, 3))
        assert "Page 2 of 3" in out
        assert "Thank you for your business! | Acme Renovations | 555-0100" in out

    def test_generated_on_only_when_given(self, make_document, make_context, texts):
        ctx = make_context(make_document())
        assert not any(t.startswith("Generated on") for t in texts(footer_commands(ctx, 1, 1)))
        out = texts(footer_commands(ctx, 1, 1, generated_on=date(2024, 5, 1)))
        assert "Generated on May 1, 2024 by Acme Renovations" in out

    def test_footer_off(self, make_document, make_context):
        assert footer_commands(make_context(make_document(), {"showFooter": False}), 1, 1) == []

    def test_band_uses_primary_color(self, make_document, make_context):
        cmds = footer_commands(make_context(make_document(), {"colorPrimary": "#112233"}), 1, 1)
        assert cmds[0].fill == "#112233"
