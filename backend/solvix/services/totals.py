"""
Calculs du devis — sous-total HT, TVA, total TTC.
Calculés une seule fois par devis puis transmis, déjà formatés, à tous les modèles.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from solvix.models import ClientInfo, CompanyInfo, LineItem, Quote
from solvix.services.currency import format_currency, format_number, to_decimal

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)


# ─── Totaux bruts ───────────────────────────────────────────────

class LineTotal(BaseModel):
    item: LineItem
    total_ht: Decimal
    vat_amount: Decimal


class VatBucket(BaseModel):
    rate: Decimal
    base: Decimal
    amount: Decimal


class QuoteTotals(BaseModel):
    lines: List[LineTotal]
    subtotal_ht: Decimal
    total_vat: Decimal
    total_ttc: Decimal
    vat_breakdown: List[VatBucket]


def line_total(item: LineItem) -> Decimal:
    return to_decimal(item.quantity) * to_decimal(item.unit_price)


def compute_totals(items: List[LineItem]) -> QuoteTotals:
    """Σ(qté × PU), Σ(qté × PU × TVA / 100), et leur somme. Aucun arrondi intermédiaire."""
    lines = []
    buckets = {}
    subtotal = Decimal(0)
    vat = Decimal(0)
    for item in items:
        ht = line_total(item)
        rate = to_decimal(item.vat_rate)
        amount = ht * rate / _HUNDRED
        lines.append(LineTotal(item=item, total_ht=ht, vat_amount=amount))
        subtotal += ht
        vat += amount
        base, acc = buckets.get(rate, (Decimal(0), Decimal(0)))
        buckets[rate] = (base + ht, acc + amount)

    breakdown = [
        VatBucket(rate=rate, base=base, amount=amount)
        for rate, (base, amount) in sorted(buckets.items())
    ]
    return QuoteTotals(
        lines=lines,
        subtotal_ht=subtotal,
        total_vat=vat,
        total_ttc=subtotal + vat,
        vat_breakdown=breakdown,
    )


# ─── Vue d'affichage ────────────────────────────────────────────

def format_date(d) -> str:
    """Date au format français jj/mm/aaaa."""
    if not d:
        return ""
    if isinstance(d, (date, datetime)):
        return d.strftime("%d/%m/%Y")
    return str(d)


class LineView(BaseModel):
    designation: str
    quantity: str
    unit_price: str
    vat_rate: str
    total_ht: str


class VatLineView(BaseModel):
    rate: str
    base: str
    amount: str


class QuoteView(BaseModel):
    """Devis prêt à afficher : chaînes formatées + totaux bruts."""
    number: str
    currency: str
    template: str
    status: str
    date_creation: str
    date_expiration: str
    date_generated: str
    notes: str
    client: ClientInfo
    company: CompanyInfo
    lines: List[LineView]
    subtotal_ht: str
    total_vat: str
    total_ttc: str
    vat_breakdown: List[VatLineView]
    totals: QuoteTotals
    stored_totals_match: bool


def _stored_totals_match(quote: Quote, totals: QuoteTotals) -> bool:
    pairs = [
        (quote.subtotal_ht, totals.subtotal_ht),
        (quote.total_vat, totals.total_vat),
        (quote.total_ttc, totals.total_ttc),
    ]
    for stored, computed in pairs:
        if stored is None:
            continue
        if abs(to_decimal(stored) - computed) > Decimal("0.005"):
            return False
    return True


def build_view(quote: Quote, today: Optional[date] = None) -> QuoteView:
    """Calcule les totaux et formate toutes les valeurs affichées du devis."""
    totals = compute_totals(quote.items)
    money = lambda v: format_currency(v, quote.currency)  # noqa: E731

    match = _stored_totals_match(quote, totals)
    if not match:
        logger.warning(
            "Devis %s : totaux stockés (%s / %s / %s) différents du recalcul (%s / %s / %s)",
            quote.number, quote.subtotal_ht, quote.total_vat, quote.total_ttc,
            totals.subtotal_ht, totals.total_vat, totals.total_ttc,
        )

    lines = [
        LineView(
            designation=lt.item.designation,
            quantity=format_number(lt.item.quantity),
            unit_price=money(lt.item.unit_price),
            vat_rate=f"{format_number(lt.item.vat_rate)}%",
            total_ht=money(lt.total_ht),
        )
        for lt in totals.lines
    ]
    breakdown = [
        VatLineView(rate=f"{format_number(b.rate)}%", base=money(b.base), amount=money(b.amount))
        for b in totals.vat_breakdown
    ]

    return QuoteView(
        number=quote.number,
        currency=quote.currency,
        template=quote.template,
        status=quote.status,
        date_creation=format_date(quote.date_creation),
        date_expiration=format_date(quote.date_expiration),
        date_generated=format_date(today or date.today()),
        notes=quote.notes or "",
        client=quote.client,
        company=quote.company,
        lines=lines,
        subtotal_ht=money(totals.subtotal_ht),
        total_vat=money(totals.total_vat),
        total_ttc=money(totals.total_ttc),
        vat_breakdown=breakdown,
        totals=totals,
        stored_totals_match=match,
    )
