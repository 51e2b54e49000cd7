"""
Images embarquées (logo, signature) — chargées avant la génération PDF
et intégrées en base64, avec délai maximal fixe.
"""

import base64
import logging
import os
from typing import Optional

import httpx

from solvix.models import CompanyInfo

logger = logging.getLogger(__name__)

IMAGE_FETCH_TIMEOUT = float(os.getenv("IMAGE_FETCH_TIMEOUT", "5"))


def inline_image(ref: Optional[str], client: Optional[httpx.Client] = None) -> Optional[str]:
    """Retourne une data URI pour l'image, ou None si elle est indisponible."""
    if not ref:
        return None
    ref = ref.strip()
    if ref.startswith("data:"):
        return ref
    if not ref.startswith(("http://", "https://")):
        logger.warning("Image ignorée (schéma non supporté) : %s", ref[:80])
        return None

    try:
        if client is None:
            with httpx.Client(timeout=IMAGE_FETCH_TIMEOUT, follow_redirects=True) as c:
                resp = c.get(ref)
        else:
            resp = client.get(ref)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Image non chargée (%s) : %s", ref, e)
        return None

    content_type = resp.headers.get("content-type", "").split(";")[0].strip().lower()
    if not content_type.startswith("image/"):
        logger.warning("Image ignorée (type %r) : %s", content_type, ref)
        return None
    return f"data:{content_type};base64,{base64.b64encode(resp.content).decode()}"


def inline_company_images(company: CompanyInfo, client: Optional[httpx.Client] = None) -> CompanyInfo:
    """Copie des infos entreprise avec logo et signature intégrés (ou retirés)."""
    return company.model_copy(update={
        "logo": inline_image(company.logo, client),
        "signature": inline_image(company.signature, client),
    })
