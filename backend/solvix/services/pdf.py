"""
Export PDF A4 — rendu HTML (mode pdf) puis conversion via xhtml2pdf.
"""

import logging
import re
from datetime import date
from io import BytesIO
from typing import Optional, Tuple

import httpx
from xhtml2pdf import pisa

from solvix.models import Quote
from solvix.services.images import inline_company_images
from solvix.services.renderer import render_document
from solvix.services.styles import TemplateStyle, get_style, resolve_template
from solvix.services.totals import build_view

logger = logging.getLogger(__name__)


class PdfGenerationError(RuntimeError):
    """Échec de la conversion HTML -> PDF."""


def _slug(value: str) -> str:
    s = re.sub(r"[^A-Za-z0-9._-]+", "-", value or "").strip("-.")
    return s or "sans-numero"


def pdf_filename(number: str, template_id: str, on: Optional[date] = None) -> str:
    """devis-<numéro>-<modèle>-<AAAA-MM-JJ>.pdf"""
    day = (on or date.today()).isoformat()
    return f"devis-{_slug(number)}-{template_id}-{day}.pdf"


def pick_style(quote: Quote, template: Optional[str] = None) -> TemplateStyle:
    """Un modèle explicite doit exister ; celui du devis stocké est résolu avec repli."""
    if template:
        return get_style(template)
    return resolve_template(quote.template)


def html_to_pdf(html: str) -> bytes:
    buffer = BytesIO()
    status = pisa.CreatePDF(html, dest=buffer, encoding="utf-8")
    if status.err:
        raise PdfGenerationError(f"xhtml2pdf : {status.err} erreur(s) de conversion")
    return buffer.getvalue()


def generate_pdf(
    quote: Quote,
    template: Optional[str] = None,
    branding: bool = True,
    client: Optional[httpx.Client] = None,
    today: Optional[date] = None,
) -> Tuple[bytes, str]:
    """Génère le PDF d'un devis. Retourne (pdf_bytes, filename)."""
    style = pick_style(quote, template)
    company = inline_company_images(quote.company, client)
    view = build_view(quote.model_copy(update={"company": company}), today=today)
    html = render_document(view, style, mode="pdf", branding=branding)

    logger.info("Génération PDF devis %s (modèle %s)", quote.number, style.id)
    pdf_bytes = html_to_pdf(html)
    return pdf_bytes, pdf_filename(quote.number, style.id, today)
