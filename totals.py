# totals.py
"""Money arithmetic for the totals block, and checks against supplied totals."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from formatting import round_money, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Supplied and recomputed money may differ by this much before it's flagged.
TOTALS_EPSILON = Decimal("0.01")


def _rate(value) -> Decimal:
    return to_decimal(value, ZERO) or ZERO


def compute_subtotal(amounts: Iterable) -> Decimal:
    return round_money(sum((to_decimal(a, ZERO) for a in amounts), ZERO))


def compute_tax_amount(subtotal, tax_rate_percent) -> Decimal:
    return round_money(to_decimal(subtotal, ZERO) * _rate(tax_rate_percent) / HUNDRED)


def compute_discount_amount(subtotal, discount_rate_percent) -> Decimal:
    return round_money(to_decimal(subtotal, ZERO) * _rate(discount_rate_percent) / HUNDRED)


def compute_total(subtotal, tax_amount, discount_amount) -> Decimal:
    return round_money(to_decimal(subtotal, ZERO) + to_decimal(tax_amount, ZERO) - to_decimal(discount_amount, ZERO))


def compute_balance_due(total, amount_paid) -> Decimal:
    return round_money(to_decimal(total, ZERO) - to_decimal(amount_paid, ZERO))


@dataclass(frozen=True)
class TotalsBreakdown:
    """The money lines of one document, ready for the totals block."""
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    total: Decimal
    amount_paid: Optional[Decimal] = None
    balance_due: Optional[Decimal] = None

    @property
    def show_tax(self) -> bool:
        return self.tax_rate > 0

    @property
    def show_discount(self) -> bool:
        return self.discount_rate > 0

    @property
    def show_payment(self) -> bool:
        return self.amount_paid is not None and self.amount_paid != 0

    @property
    def is_settled(self) -> bool:
        return self.balance_due is not None and self.balance_due <= 0


@dataclass(frozen=True)
class TotalsDiscrepancy:
    field: str
    supplied: Decimal
    computed: Decimal

    def __str__(self) -> str:
        return f"{self.field}: supplied {self.supplied} but computed {self.computed}"


def calculate_totals(data) -> TotalsBreakdown:
    """
    Money lines as rendered. The caller's subtotal and total are trusted;
    tax and discount are derived from the supplied subtotal.
    """
    subtotal = round_money(data.subtotal)
    tax_rate = _rate(data.tax_rate_percent)
    discount_rate = _rate(data.discount_rate_percent)
    amount_paid = None
    balance_due = None
    total = round_money(data.total)
    if data.is_invoice and data.amount_paid is not None:
        amount_paid = round_money(data.amount_paid)
        balance_due = compute_balance_due(total, amount_paid)
    return TotalsBreakdown(
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=compute_tax_amount(subtotal, tax_rate),
        discount_rate=discount_rate,
        discount_amount=compute_discount_amount(subtotal, discount_rate),
        total=total,
        amount_paid=amount_paid,
        balance_due=balance_due,
    )


def validate_totals(data) -> list[TotalsDiscrepancy]:
    """Compare the supplied subtotal/total with what the line items add up to."""
    issues = []
    computed_subtotal = compute_subtotal(item.amount for item in data.line_items)
    supplied_subtotal = round_money(data.subtotal)
    if abs(supplied_subtotal - computed_subtotal) > TOTALS_EPSILON:
        issues.append(TotalsDiscrepancy("subtotal", supplied_subtotal, computed_subtotal))

    computed_total = compute_total(
        supplied_subtotal,
        compute_tax_amount(supplied_subtotal, data.tax_rate_percent),
        compute_discount_amount(supplied_subtotal, data.discount_rate_percent),
    )
    supplied_total = round_money(data.total)
    if abs(supplied_total - computed_total) > TOTALS_EPSILON:
        issues.append(TotalsDiscrepancy("total", supplied_total, computed_total))

    for issue in issues:
        logger.warning("Document %s totals mismatch: %s", data.number, issue)
    return issues
