"""
Devises — règles d'affichage des montants par code ISO.
Position du symbole, nombre de décimales, séparateurs.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext
from typing import List, Literal, Optional

from pydantic import BaseModel


class Currency(BaseModel):
    code: str
    name: str
    symbol: str
    position: Literal["before", "after"]
    decimals: int
    thousands_separator: str
    decimal_separator: str


_TABLE = [
    Currency(code="EUR", name="Euro", symbol="€", position="after", decimals=2,
             thousands_separator=" ", decimal_separator=","),
    Currency(code="USD", name="Dollar américain", symbol="$", position="before", decimals=2,
             thousands_separator=",", decimal_separator="."),
    Currency(code="XAF", name="Franc CFA", symbol="FCFA", position="after", decimals=0,
             thousands_separator=" ", decimal_separator=","),
    Currency(code="GBP", name="Livre sterling", symbol="£", position="before", decimals=2,
             thousands_separator=",", decimal_separator="."),
    Currency(code="CHF", name="Franc suisse", symbol="CHF", position="after", decimals=2,
             thousands_separator=" ", decimal_separator="."),
    Currency(code="CAD", name="Dollar canadien", symbol="CAD", position="before", decimals=2,
             thousands_separator=",", decimal_separator="."),
    Currency(code="JPY", name="Yen japonais", symbol="¥", position="before", decimals=0,
             thousands_separator=",", decimal_separator="."),
    Currency(code="CNY", name="Yuan chinois", symbol="¥", position="before", decimals=2,
             thousands_separator=",", decimal_separator="."),
    Currency(code="MAD", name="Dirham marocain", symbol="MAD", position="after", decimals=2,
             thousands_separator=" ", decimal_separator=","),
    Currency(code="TND", name="Dinar tunisien", symbol="TND", position="after", decimals=3,
             thousands_separator=" ", decimal_separator=","),
]

CURRENCIES = {c.code: c for c in _TABLE}


def get_currency(code: str) -> Optional[Currency]:
    return CURRENCIES.get((code or "").upper())


def list_currencies() -> List[Currency]:
    return list(_TABLE)


def to_decimal(value) -> Decimal:
    """Convertit int/float/str/Decimal en Decimal sans passer par le binaire."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Montant invalide: {value!r}")


def _group(digits: str, sep: str) -> str:
    """Insère le séparateur de milliers dans une chaîne de chiffres."""
    head = len(digits) % 3 or 3
    parts = [digits[:head]]
    parts += [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return sep.join(parts)


def format_number(value) -> str:
    """Nombre sans zéros inutiles ni exposant : 2, 1.5, 295."""
    d = to_decimal(value).normalize()
    if d.is_zero():
        return "0"
    return format(d, "f")


def format_currency(amount, code: str) -> str:
    """Formate un montant selon la devise. Code inconnu : montant brut."""
    currency = get_currency(code)
    if currency is None:
        return format_number(amount)

    value = to_decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Montant invalide: {amount!r}")
    with localcontext() as ctx:
        # quantize échoue si le résultat dépasse la précision du contexte
        ctx.prec = max(ctx.prec, value.adjusted() + currency.decimals + 2)
        rounded = value.quantize(Decimal(1).scaleb(-currency.decimals), rounding=ROUND_HALF_UP)
        negative = rounded < 0
        text = f"{abs(rounded):.{currency.decimals}f}"

    integer_part, _, decimal_part = text.partition(".")
    number = _group(integer_part, currency.thousands_separator)
    if currency.decimals > 0 and decimal_part:
        number += currency.decimal_separator + decimal_part
    if negative:
        number = "-" + number

    if currency.position == "before":
        if negative:
            return f"-{currency.symbol}{number[1:]}"
        return f"{currency.symbol}{number}"
    return f"{number} {currency.symbol}"
