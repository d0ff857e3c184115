"""
Shared fixtures: sample documents, payloads, section contexts and images.
"""

import io
from datetime import date
from decimal import Decimal

import pytest
from PIL import Image

from documents import DocumentData, DocumentKind, DocumentStatus, Issuer, LineItem, Party
from draw import TextCommand
from formatting import Formatter
from page_stream import PageGeometry
from sections import SectionContext
from template_config import resolve
from totals import calculate_totals
from translations import get_translator


@pytest.fixture
def issuer():
    return Issuer(
        business_name="Acme Renovations",
        email="office@acme.test",
        phone="555-0100",
        address="12 Main St",
        city="Springfield",
        state="IL",
        zip_code="62701",
    )


@pytest.fixture
def party():
    return Party(
        first_name="Jane",
        last_name="Doe",
        email="jane@example.test",
        phone="555-0199",
        address="4 Elm Rd",
        city="Springfield",
        state="IL",
        zip_code="62702",
    )


@pytest.fixture
def make_document(issuer, party):
    """Factory for DocumentData; keyword overrides replace defaults."""

    def _make(**overrides):
        fields = dict(
            kind=DocumentKind.ESTIMATE,
            number="EST-1001",
            status=DocumentStatus.PENDING,
            issue_date=date(2024, 3, 5),
            party=party,
            issuer=issuer,
            line_items=(LineItem("Labor", Decimal("1"), Decimal("500.00"), Decimal("500.00")),),
            subtotal=Decimal("500.00"),
            total=Decimal("500.00"),
        )
        fields.update(overrides)
        return DocumentData(**fields)

    return _make


@pytest.fixture
def make_items():
    def _make(count, amount="25.00", notes=None):
        return tuple(
            LineItem(f"Item {i:02d}", Decimal("1"), Decimal(amount), Decimal(amount), notes)
            for i in range(1, count + 1)
        )

    return _make


@pytest.fixture
def make_context():
    """SectionContext for block-level tests."""

    def _make(data, config=None, locale="en-US", **kwargs):
        fmt = Formatter(locale=locale)
        return SectionContext(
            data=data,
            config=resolve(config),
            fmt=fmt,
            t=fmt.translator,
            geometry=kwargs.pop("geometry", PageGeometry()),
            totals=calculate_totals(data),
            **kwargs,
        )

    return _make


@pytest.fixture
def payload():
    """Host-side JSON shape of a small invoice."""
    return {
        "kind": "invoice",
        "number": "INV-2024-07",
        "status": "partially_paid",
        "issueDate": "2024-03-05",
        "dueDate": "2024-04-04",
        "items": [
            {"description": "Demolition", "quantity": 2, "unitPrice": 150, "amount": 300},
            {"description": "Drywall", "quantity": "3", "unitPrice": "100.00", "amount": "300.00",
             "notes": "Moisture resistant"},
        ],
        "subtotal": "600.00",
        "taxRatePercent": 8,
        "discountRatePercent": 0,
        "total": "648.00",
        "amountPaid": "200.00",
        "paymentMethod": "Bank transfer",
        "client": {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.test"},
        "contractor": {"businessName": "Acme Renovations", "phone": "555-0100"},
        "projectTitle": "Kitchen remodel",
        "terms": "Payment due within 30 days.",
    }


@pytest.fixture
def png_bytes():
    """A small valid PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (40, 20), (0, 51, 102)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def texts():
    """Text of every TextCommand in a list of commands (or a Page)."""

    def _texts(commands):
        commands = getattr(commands, "commands", commands)
        return [c.text for c in commands if isinstance(c, TextCommand)]

    return _texts
