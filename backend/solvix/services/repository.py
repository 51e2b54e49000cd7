"""
Lecture des devis et des profils entreprise (PostgreSQL).
Toutes les requêtes sont filtrées par propriétaire (user_id).
"""

import logging
from typing import Optional

from solvix.database import get_cursor
from solvix.models import ClientInfo, CompanyInfo, LineItem, Quote

logger = logging.getLogger(__name__)


def get_profile(user_id: str) -> Optional[dict]:
    """Profil entreprise de l'utilisateur (table profiles)."""
    with get_cursor() as cur:
        cur.execute("SELECT * FROM profiles WHERE user_id = %s", (user_id,))
        return cur.fetchone()


def company_from_profile(profile: Optional[dict]) -> CompanyInfo:
    p = profile or {}
    return CompanyInfo(
        name=p.get("company_name") or "",
        address=p.get("company_address") or "",
        phone=p.get("company_phone") or "",
        email=p.get("company_email") or "",
        logo=p.get("company_logo") or None,
        signature=p.get("company_signature") or None,
        rccm=p.get("company_rccm") or None,
        ncc=p.get("company_ncc") or None,
    )


def is_premium(profile: Optional[dict]) -> bool:
    return bool((profile or {}).get("is_premium"))


def _client_from_row(row: dict) -> ClientInfo:
    return ClientInfo(
        name=row.get("client_name") or "",
        company=row.get("client_company") or "",
        email=row.get("client_email") or "",
        phone=row.get("client_phone") or "",
        address=row.get("client_address") or "",
    )


def _item_from_row(row: dict) -> LineItem:
    return LineItem(
        id=str(row.get("id") or ""),
        designation=row.get("designation") or "",
        quantity=float(row.get("quantity") or 0),
        unit_price=float(row.get("unit_price") or 0),
        vat_rate=float(row.get("vat_rate") or 0),
    )


def get_quote(quote_id: str, user_id: str, profile: Optional[dict] = None) -> Optional[Quote]:
    """Devis complet (client, articles ordonnés, entreprise) ou None."""
    with get_cursor() as cur:
        cur.execute("""
            SELECT d.*,
                   c.name AS client_name, c.company AS client_company,
                   c.email AS client_email, c.phone AS client_phone,
                   c.address AS client_address
            FROM devis d
            LEFT JOIN clients c ON c.id = d.client_id
            WHERE d.id = %s AND d.user_id = %s
        """, (quote_id, user_id))
        row = cur.fetchone()
        if not row:
            logger.info("Devis %s introuvable pour l'utilisateur %s", quote_id, user_id)
            return None

        cur.execute("""
            SELECT id, designation, quantity, unit_price, vat_rate
            FROM articles_devis
            WHERE devis_id = %s
            ORDER BY order_index, created_at
        """, (quote_id,))
        items = [_item_from_row(r) for r in cur.fetchall()]

    if profile is None:
        profile = get_profile(user_id)

    return Quote(
        id=str(row["id"]),
        number=row.get("quote_number") or "",
        date_creation=row.get("date_creation"),
        date_expiration=row.get("date_expiration"),
        currency=row.get("currency") or "EUR",
        notes=row.get("notes") or "",
        template=row.get("template") or "classic",
        status=row.get("status") or "Brouillon",
        items=items,
        client=_client_from_row(row),
        company=company_from_profile(profile),
        subtotal_ht=row.get("subtotal_ht"),
        total_vat=row.get("total_vat"),
        total_ttc=row.get("total_ttc"),
    )
