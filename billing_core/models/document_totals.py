"""Document totals aggregation."""
from decimal import Decimal
from typing import Iterable

from billing_core.models.line_item import LineItem
from billing_core.utils.number_format import money_to_json, round_money, ZERO


class DocumentTotals:
    """Totals derived from a sequence of line items. Never stored on a draft."""

    def __init__(self, subtotal=ZERO, total_discount=ZERO, total_tax=ZERO):
        self.subtotal = subtotal
        self.total_discount = total_discount
        self.total_tax = total_tax

    @property
    def taxable_amount(self) -> Decimal:
        return self.subtotal - self.total_discount

    @property
    def total_amount(self) -> Decimal:
        return self.taxable_amount + self.total_tax

    def rounded(self):
        """Two-decimal values for display."""
        return {
            'subtotal': round_money(self.subtotal),
            'total_discount': round_money(self.total_discount),
            'taxable_amount': round_money(self.taxable_amount),
            'total_tax': round_money(self.total_tax),
            'total_amount': round_money(self.total_amount),
        }

    def to_payload(self):
        """API totals block (keys match the document endpoints)."""
        return {
            'subtotal': money_to_json(self.subtotal),
            'totalDiscount': money_to_json(self.total_discount),
            'taxAmount': money_to_json(self.total_tax),
            'totalAmount': money_to_json(self.total_amount),
        }

    def __eq__(self, other):
        return (
            isinstance(other, DocumentTotals)
            and other.subtotal == self.subtotal
            and other.total_discount == self.total_discount
            and other.total_tax == self.total_tax
        )

    def __repr__(self):
        return (
            f"<DocumentTotals(subtotal={self.subtotal}, discount={self.total_discount}, "
            f"tax={self.total_tax}, total={self.total_amount})>"
        )


def aggregate(items: Iterable[LineItem]) -> DocumentTotals:
    """
    Fold line items into document totals.

    Pure and order independent; an empty sequence yields zeros.
    Callers recompute on every read instead of caching the result.
    """
    subtotal = ZERO
    total_discount = ZERO
    total_tax = ZERO

    for item in items:
        subtotal += item.line_gross
        total_discount += item.discount_amount
        total_tax += item.tax_amount

    return DocumentTotals(subtotal, total_discount, total_tax)
