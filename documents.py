# documents.py
"""Document data handed to the renderer, and parsing from host JSON."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from formatting import parse_date, to_decimal

ZERO = Decimal("0")


class DocumentDataError(ValueError):
    """Raised when a payload can't be turned into a renderable document."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid document data")


class DocumentKind(str, enum.Enum):
    ESTIMATE = "estimate"
    INVOICE = "invoice"


class DocumentStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CONVERTED = "converted"
    PAID = "paid"
    PARTIALLY_PAID = "partially_paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Status groups drive the color of the status value in the meta block
POSITIVE_STATUSES = frozenset({DocumentStatus.ACCEPTED, DocumentStatus.PAID, DocumentStatus.CONVERTED})
NEGATIVE_STATUSES = frozenset({DocumentStatus.REJECTED, DocumentStatus.OVERDUE, DocumentStatus.CANCELLED})
IN_PROGRESS_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.PARTIALLY_PAID, DocumentStatus.SENT})


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class Party:
    """The client the document is addressed to."""
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    @property
    def display_name(self) -> str:
        return " ".join(p for p in [(self.first_name or "").strip(), (self.last_name or "").strip()] if p)


@dataclass(frozen=True)
class Issuer:
    """The contractor issuing the document."""
    business_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    logo: bytes | str | None = None


@dataclass(frozen=True)
class ProjectReference:
    title: str
    description: Optional[str] = None


@dataclass(frozen=True)
class DocumentData:
    kind: DocumentKind
    number: str
    status: DocumentStatus | str
    issue_date: date
    party: Party
    issuer: Issuer
    line_items: tuple[LineItem, ...] = ()
    subtotal: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO
    discount_rate_percent: Decimal = ZERO
    total: Decimal = ZERO
    due_or_expiry_date: Optional[date] = None
    amount_paid: Optional[Decimal] = None
    project: Optional[ProjectReference] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    signature_image: bytes | str | None = None
    payment_method: Optional[str] = None
    signed_on: Optional[date] = None

    @property
    def is_invoice(self) -> bool:
        return self.kind == DocumentKind.INVOICE

    @classmethod
    def from_dict(cls, payload: dict) -> "DocumentData":
        """
        Build a DocumentData from the host's JSON shape (camelCase keys).
        Collects every problem before raising DocumentDataError.
        """
        if not isinstance(payload, dict):
            raise DocumentDataError(["document payload must be an object"])

        problems: list[str] = []

        raw_kind = str(payload.get("kind") or payload.get("documentKind") or "").strip().lower()
        try:
            kind = DocumentKind(raw_kind)
        except ValueError:
            problems.append(f"unknown document kind: {raw_kind!r}")
            kind = DocumentKind.ESTIMATE

        number = _text(payload.get("number") or payload.get("documentNumber"))
        if not number:
            problems.append("document number is required")

        issue_date = parse_date(payload.get("issueDate"))
        if issue_date is None:
            problems.append("issueDate is required (YYYY-MM-DD)")

        due_raw = payload.get("dueDate") or payload.get("expiryDate") or payload.get("dueOrExpiryDate")
        due_date = parse_date(due_raw) if due_raw else None
        if due_raw and due_date is None:
            problems.append(f"invalid due/expiry date: {due_raw!r}")

        items: list[LineItem] = []
        raw_items = payload.get("items", payload.get("lineItems")) or []
        if not isinstance(raw_items, list):
            problems.append("items must be a list")
            raw_items = []
        for i, raw in enumerate(raw_items, start=1):
            if not isinstance(raw, dict):
                problems.append(f"item {i} must be an object")
                continue
            nums = {}
            for key in ("quantity", "unitPrice", "amount"):
                val = to_decimal(raw.get(key))
                if val is None:
                    problems.append(f"item {i}: {key} is not a number")
                    val = ZERO
                nums[key] = val
            items.append(LineItem(
                description=_text(raw.get("description")),
                quantity=nums["quantity"],
                unit_price=nums["unitPrice"],
                amount=nums["amount"],
                notes=_text(raw.get("notes")) or None,
            ))

        def money(key: str, *aliases: str, required: bool = False) -> Decimal | None:
            raw = payload.get(key)
            for alias in aliases:
                if raw is None:
                    raw = payload.get(alias)
            if raw is None or raw == "":
                if required:
                    problems.append(f"{key} is required")
                return None
            val = to_decimal(raw)
            if val is None:
                problems.append(f"{key} is not a number: {raw!r}")
            return val

        subtotal = money("subtotal", required=True)
        total = money("total", required=True)
        tax_rate = money("taxRatePercent", "tax")
        discount_rate = money("discountRatePercent", "discount")
        amount_paid = money("amountPaid")

        party = _party(payload.get("client") or payload.get("party") or {})
        issuer = _issuer(payload.get("contractor") or payload.get("issuer") or {})
        if not issuer.business_name:
            problems.append("contractor businessName is required")

        project = None
        project_title = _text(payload.get("projectTitle"))
        raw_project = payload.get("project")
        if isinstance(raw_project, dict):
            project_title = _text(raw_project.get("title")) or project_title
            project_desc = _text(raw_project.get("description")) or None
        else:
            project_desc = _text(payload.get("projectDescription")) or None
        if project_title:
            project = ProjectReference(project_title, project_desc)

        signed_on = parse_date(payload.get("signedOn")) if payload.get("signedOn") else None

        if problems:
            raise DocumentDataError(problems)

        return cls(
            kind=kind,
            number=number,
            status=_status(payload.get("status")),
            issue_date=issue_date,
            due_or_expiry_date=due_date,
            line_items=tuple(items),
            subtotal=subtotal,
            tax_rate_percent=tax_rate or ZERO,
            discount_rate_percent=discount_rate or ZERO,
            total=total,
            amount_paid=amount_paid if kind == DocumentKind.INVOICE else None,
            party=party,
            issuer=issuer,
            project=project,
            terms=_text(payload.get("terms")) or None,
            notes=_text(payload.get("notes")) or None,
            signature_image=(payload.get("clientSignature") or payload.get("signatureImage") or None)
            if kind == DocumentKind.INVOICE else None,
            payment_method=_text(payload.get("paymentMethod")) or None,
            signed_on=signed_on,
        )


def check_required_fields(data: DocumentData) -> list[str]:
    """Structural problems that make a document impossible to render."""
    problems = []
    if not isinstance(data.kind, DocumentKind):
        problems.append("document kind must be estimate or invoice")
    if not (data.number or "").strip():
        problems.append("document number is required")
    if not isinstance(data.issue_date, date):
        problems.append("issue date is required")
    if data.issuer is None or not (data.issuer.business_name or "").strip():
        problems.append("issuer business name is required")
    if data.party is None:
        problems.append("client record is required")
    for name in ("subtotal", "total", "tax_rate_percent", "discount_rate_percent"):
        if not isinstance(getattr(data, name), Decimal):
            problems.append(f"{name} must be a Decimal")
    for i, item in enumerate(data.line_items or (), start=1):
        if not isinstance(item.amount, Decimal) or not isinstance(item.unit_price, Decimal):
            problems.append(f"item {i}: amounts must be Decimals")
    return problems


def _text(value) -> str:
    return str(value or "").strip()


def _status(value) -> DocumentStatus | str:
    raw = _text(value).lower()
    try:
        return DocumentStatus(raw)
    except ValueError:
        return raw or DocumentStatus.DRAFT


def _party(raw: dict) -> Party:
    raw = raw if isinstance(raw, dict) else {}
    return Party(
        first_name=_text(raw.get("firstName")),
        last_name=_text(raw.get("lastName")),
        email=_text(raw.get("email")) or None,
        phone=_text(raw.get("phone")) or None,
        address=_text(raw.get("address")) or None,
        city=_text(raw.get("city")) or None,
        state=_text(raw.get("state")) or None,
        zip_code=_text(raw.get("zipCode")) or None,
    )


def _issuer(raw: dict) -> Issuer:
    raw = raw if isinstance(raw, dict) else {}
    return Issuer(
        business_name=_text(raw.get("businessName")),
        email=_text(raw.get("email")) or None,
        phone=_text(raw.get("phone")) or None,
        address=_text(raw.get("address")) or None,
        city=_text(raw.get("city")) or None,
        state=_text(raw.get("state")) or None,
        zip_code=_text(raw.get("zipCode")) or None,
        logo=raw.get("logo") or None,
    )
