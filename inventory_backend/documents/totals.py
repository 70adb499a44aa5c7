# documents/totals.py

"""
DOCUMENT TOTALS

Pure arithmetic shared by invoices, quotations and purchase orders.

Per line:
    gross    = quantity * unit_price
    discount = gross * discount_percent / 100
    net      = gross - discount
    tax      = net * tax_rate / 100
    total    = net + tax

Per document:
    subtotal = sum(net)
    tax      = sum(tax)
    total    = subtotal + tax

Rules:
- No rounding here. Values are rounded to 2 dp only when persisted
  (see DocumentTotals.persisted() and LineTotals.persisted_total).
- Inputs are assumed non-negative; callers validate first (documents/lines.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from core.coerce import HUNDRED, ZERO, money


@dataclass(frozen=True)
class LineTotals:
    gross: Decimal
    discount: Decimal
    net: Decimal
    tax: Decimal
    total: Decimal

    @property
    def persisted_total(self) -> Decimal:
        return money(self.total)


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    lines: tuple[LineTotals, ...] = ()

    def persisted(self) -> tuple[Decimal, Decimal, Decimal]:
        """
        (subtotal, tax_amount, total_amount) as stored on the header.

        total is the sum of the two rounded parts so the stored header always
        satisfies total_amount == subtotal + tax_amount exactly.
        """
        subtotal = money(self.subtotal)
        tax = money(self.tax)
        return subtotal, tax, subtotal + tax


def compute_line_totals(
    *,
    quantity,
    unit_price,
    discount_percent=ZERO,
    tax_rate=ZERO,
) -> LineTotals:
    qty = Decimal(quantity)
    price = Decimal(unit_price)
    discount_pct = Decimal(discount_percent or 0)
    rate = Decimal(tax_rate or 0)

    gross = qty * price
    discount = gross * discount_pct / HUNDRED
    net = gross - discount
    tax = net * rate / HUNDRED

    return LineTotals(
        gross=gross,
        discount=discount,
        net=net,
        tax=tax,
        total=net + tax,
    )


def compute_line_total(quantity, unit_price, discount_percent=ZERO, tax_rate=ZERO) -> Decimal:
    return compute_line_totals(
        quantity=quantity,
        unit_price=unit_price,
        discount_percent=discount_percent,
        tax_rate=tax_rate,
    ).total


def compute_document_totals(lines: Iterable[LineTotals]) -> DocumentTotals:
    lines = tuple(lines)
    subtotal = sum((line.net for line in lines), ZERO)
    tax = sum((line.tax for line in lines), ZERO)
    return DocumentTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, lines=lines)
