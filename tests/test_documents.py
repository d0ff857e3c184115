"""
Tests for documents module: payload parsing and required-field checks.
"""

from datetime import date
from decimal import Decimal

import pytest

from documents import (
    DocumentData,
    DocumentDataError,
    DocumentKind,
    DocumentStatus,
    Issuer,
    check_required_fields,
)


class TestFromDict:
    """DocumentData.from_dict on the host JSON shape."""

    def test_invoice_payload(self, payload):
        doc = DocumentData.from_dict(payload)
        assert doc.kind is DocumentKind.INVOICE
        assert doc.number == "INV-2024-07"
        assert doc.status is DocumentStatus.PARTIALLY_PAID
        assert doc.issue_date == date(2024, 3, 5)
        assert doc.due_or_expiry_date == date(2024, 4, 4)
        assert doc.subtotal == Decimal("600.00")
        assert doc.tax_rate_percent == Decimal("8")
        assert doc.amount_paid == Decimal("200.00")
        assert doc.line_items[1].notes == "Moisture resistant"
        assert doc.line_items[0].unit_price == Decimal("150")
        assert doc.party.display_name == "Jane Doe"
        assert doc.party.phone is None
        assert doc.issuer.business_name == "Acme Renovations"
        assert doc.project.title == "Kitchen remodel"
        assert doc.payment_method == "Bank transfer"

    def test_estimate_drops_payment_and_signature(self, payload):
        payload.update(kind="estimate", clientSignature="data:image/png;base64,AAAA")
        doc = DocumentData.from_dict(payload)
        assert doc.kind is DocumentKind.ESTIMATE
        assert doc.amount_paid is None
        assert doc.signature_image is None

    def test_aliases(self, payload):
        del payload["number"]
        del payload["items"]
        payload["documentNumber"] = "INV-9"
        payload["lineItems"] = [{"description": "x", "quantity": 1, "unitPrice": 1, "amount": 1}]
        doc = DocumentData.from_dict(payload)
        assert doc.number == "INV-9"
        assert len(doc.line_items) == 1

    def test_project_object(self, payload):
        payload["project"] = {"title": "Bathroom", "description": "Full tile job"}
        doc = DocumentData.from_dict(payload)
        assert doc.project.title == "Bathroom"
        assert doc.project.description == "Full tile job"

    def test_unknown_status_kept_as_text(self, payload):
        payload["status"] = "on_hold"
        assert DocumentData.from_dict(payload).status == "on_hold"

    def test_missing_status_is_draft(self, payload):
        del payload["status"]
        assert DocumentData.from_dict(payload).status is DocumentStatus.DRAFT

    def test_all_problems_reported(self, payload):
        payload.update(kind="receipt", number="", issueDate="soon", subtotal=None)
        payload["items"][0]["amount"] = "lots"
        with pytest.raises(DocumentDataError) as exc:
            DocumentData.from_dict(payload)
        problems = exc.value.problems
        assert any("kind" in p for p in problems)
        assert any("number" in p for p in problems)
        assert any("issueDate" in p for p in problems)
        assert any("subtotal" in p for p in problems)
        assert any("item 1" in p for p in problems)

    def test_missing_business_name(self, payload):
        payload["contractor"] = {}
        with pytest.raises(DocumentDataError, match="businessName"):
            DocumentData.from_dict(payload)

    def test_not_a_dict(self):
        with pytest.raises(DocumentDataError):
            DocumentData.from_dict(["nope"])


class TestRequiredFields:
    """check_required_fields on already-built records."""

    def test_valid(self, make_document):
        assert check_required_fields(make_document()) == []

    def test_missing_number_and_business(self, make_document):
        doc = make_document(number="  ", issuer=Issuer(business_name=""))
        problems = check_required_fields(doc)
        assert "document number is required" in problems
        assert "issuer business name is required" in problems

    def test_missing_issue_date(self, make_document):
        assert "issue date is required" in check_required_fields(make_document(issue_date=None))

    def test_float_amounts_rejected(self, make_document):
        problems = check_required_fields(make_document(subtotal=500.0))
        assert "subtotal must be a Decimal" in problems
