"""
API Devis — aperçu, impression, export PDF et partage des devis.
"""

import asyncio
import logging
import urllib.parse
from functools import partial
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response

from solvix.api.auth import create_download_token, get_current_user, get_download_user
from solvix.models import CurrencyOut, Quote, ShareEmailRequest, ShareLink, TemplateOut
from solvix.services.currency import format_currency, list_currencies
from solvix.services.pdf import PdfGenerationError, generate_pdf, pick_style
from solvix.services.renderer import render_document
from solvix.services.repository import get_profile, get_quote, is_premium
from solvix.services.share import (
    ShareError, compose_email, mailto_link, send_email, whatsapp_link,
)
from solvix.services.styles import STYLES, UnknownTemplateError, aliases_for
from solvix.services.totals import build_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devis", tags=["devis"])


# ─── Helpers ───────────────────────────────────────────────

def _load(quote_id: str, user: dict):
    """Devis + profil du propriétaire, 404 si absent."""
    profile = get_profile(user["sub"]) or {}
    quote = get_quote(quote_id, user["sub"], profile=profile)
    if not quote:
        raise HTTPException(404, "Devis non trouvé")
    return quote, profile


def _style(quote: Quote, template: Optional[str]):
    try:
        return pick_style(quote, template)
    except UnknownTemplateError as e:
        raise HTTPException(400, str(e))


def _actions(quote: Quote, template_id: str, user: dict) -> dict:
    """Liens de la barre d'outils ; le lien PDF porte un jeton court (pas d'en-tête Authorization)."""
    query = urllib.parse.urlencode({"template": template_id, "token": create_download_token(user["sub"])})
    actions = {
        "pdf": f"/api/devis/{quote.id}/pdf?{query}",
        "whatsapp": whatsapp_link(quote, quote.client.phone),
    }
    try:
        actions["mailto"] = mailto_link(compose_email(quote))
    except ShareError:
        pass
    return actions


async def _pdf(quote: Quote, template: Optional[str], branding: bool):
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(
            None, partial(generate_pdf, quote, template, branding)
        )
    except UnknownTemplateError as e:
        raise HTTPException(400, str(e))
    except PdfGenerationError as e:
        logger.error("PDF devis %s : %s", quote.number, e)
        raise HTTPException(502, "Erreur lors de la génération du PDF")


def _pdf_response(pdf_bytes: bytes, filename: str) -> Response:
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ─── CATALOGUES ────────────────────────────────────────────

@router.get("/templates", response_model=list[TemplateOut])
async def list_templates():
    """Modèles visuels disponibles."""
    return [
        TemplateOut(id=s.id, label=s.label, aliases=aliases_for(s.id))
        for s in STYLES.values()
    ]


@router.get("/currencies", response_model=list[CurrencyOut])
async def list_currency_rules():
    """Devises supportées, avec un exemple de formatage."""
    return [
        CurrencyOut(
            code=c.code, name=c.name, symbol=c.symbol, position=c.position,
            decimals=c.decimals, example=format_currency(1234.5, c.code),
        )
        for c in list_currencies()
    ]


# ─── RENDU SANS STOCKAGE ───────────────────────────────────

@router.post("/render", response_class=HTMLResponse)
async def render_posted(
    quote: Quote,
    template: Optional[str] = None,
    mode: Literal["screen", "print", "pdf"] = "screen",
    branding: bool = True,
):
    """Rendu HTML d'un devis transmis dans la requête."""
    style = _style(quote, template)
    return render_document(build_view(quote), style, mode=mode, branding=branding)


@router.post("/render/pdf")
async def render_posted_pdf(
    quote: Quote,
    template: Optional[str] = None,
    branding: bool = True,
):
    """PDF d'un devis transmis dans la requête."""
    pdf_bytes, filename = await _pdf(quote, template, branding)
    return _pdf_response(pdf_bytes, filename)


# ─── DEVIS STOCKÉS ─────────────────────────────────────────

@router.get("/{quote_id}")
async def get_devis(quote_id: str, user: dict = Depends(get_current_user)):
    """Devis avec totaux recalculés et valeurs formatées."""
    quote, _ = _load(quote_id, user)
    view = build_view(quote)
    totals = view.totals
    return {
        "quote": quote.model_dump(mode="json"),
        "totals": {
            "subtotal_ht": float(totals.subtotal_ht),
            "total_vat": float(totals.total_vat),
            "total_ttc": float(totals.total_ttc),
        },
        "display": view.model_dump(
            mode="json",
            include={"subtotal_ht", "total_vat", "total_ttc", "lines", "vat_breakdown",
                     "date_creation", "date_expiration"},
        ),
        "stored_totals_match": view.stored_totals_match,
    }


@router.get("/{quote_id}/preview", response_class=HTMLResponse)
async def preview_devis(
    quote_id: str,
    template: Optional[str] = None,
    user: dict = Depends(get_current_user),
):
    """Aperçu écran avec barre d'actions (imprimer, PDF, partage)."""
    quote, profile = _load(quote_id, user)
    style = _style(quote, template)
    return render_document(
        build_view(quote), style, mode="screen",
        branding=not is_premium(profile), actions=_actions(quote, style.id, user),
    )


@router.get("/{quote_id}/print", response_class=HTMLResponse)
async def print_devis(
    quote_id: str,
    template: Optional[str] = None,
    user: dict = Depends(get_current_user),
):
    """Document prêt pour l'impression navigateur."""
    quote, profile = _load(quote_id, user)
    style = _style(quote, template)
    return render_document(build_view(quote), style, mode="print", branding=not is_premium(profile))


@router.get("/{quote_id}/pdf")
async def download_pdf(
    quote_id: str,
    template: Optional[str] = None,
    user: dict = Depends(get_download_user),
):
    """Télécharge le PDF A4 du devis."""
    quote, profile = _load(quote_id, user)
    pdf_bytes, filename = await _pdf(quote, template, not is_premium(profile))
    return _pdf_response(pdf_bytes, filename)


# ─── PARTAGE ───────────────────────────────────────────────

@router.get("/{quote_id}/share/whatsapp", response_model=ShareLink)
async def share_whatsapp(
    quote_id: str,
    phone: Optional[str] = Query(None, description="Numéro du destinataire, client par défaut"),
    user: dict = Depends(get_current_user),
):
    quote, _ = _load(quote_id, user)
    return ShareLink(channel="whatsapp", url=whatsapp_link(quote, phone if phone is not None else quote.client.phone))


@router.get("/{quote_id}/share/mailto", response_model=ShareLink)
async def share_mailto(quote_id: str, user: dict = Depends(get_current_user)):
    quote, _ = _load(quote_id, user)
    try:
        payload = compose_email(quote)
    except ShareError as e:
        raise HTTPException(400, str(e))
    return ShareLink(channel="mailto", url=mailto_link(payload))


@router.post("/{quote_id}/share/email")
async def share_email(
    quote_id: str,
    data: ShareEmailRequest,
    user: dict = Depends(get_current_user),
):
    """Envoie le devis par email, PDF en pièce jointe."""
    quote, profile = _load(quote_id, user)
    try:
        payload = compose_email(quote, data.to, data.subject, data.message)
    except ShareError as e:
        raise HTTPException(400, str(e))

    pdf = None
    if data.attach_pdf:
        pdf = await _pdf(quote, data.template, not is_premium(profile))

    loop = asyncio.get_running_loop()
    success, message = await loop.run_in_executor(None, partial(send_email, payload, pdf))
    if not success:
        raise HTTPException(502, f"Erreur lors de l'envoi de l'email : {message}")
    return {"status": "ok", "message": message, "to": payload.to}
