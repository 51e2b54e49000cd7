"""
Partage du devis : email (Resend HTTP ou SMTP), lien mailto, lien WhatsApp.
"""

import base64
import logging
import os
import re
import smtplib
import urllib.parse
from email.header import Header
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional, Tuple

import httpx
from pydantic import BaseModel

from solvix.models import Quote

logger = logging.getLogger(__name__)

RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_NAME = os.getenv("SMTP_NAME", "Solvix")
SMTP_FROM = os.getenv("SMTP_FROM", "") or SMTP_USER or "onboarding@resend.dev"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ShareError(ValueError):
    """Données de partage invalides (destinataire manquant, format...)."""


class EmailPayload(BaseModel):
    to: str
    subject: str
    message: str


# ─── MESSAGES ───────────────────────────────────────────────────

def default_email_message(number: str) -> str:
    return (
        "Bonjour,\n\n"
        f"Veuillez trouver ci-joint le devis {number} que vous avez demandé.\n\n"
        "N'hésitez pas à me contacter si vous avez des questions.\n\n"
        "Cordialement,"
    )


def default_whatsapp_message(number: str) -> str:
    return (
        "Bonjour,\n\n"
        f"Voici le devis {number} que vous avez demandé.\n\n"
        "N'hésitez pas à me contacter si vous avez des questions.\n\n"
        "Cordialement"
    )


def compose_email(
    quote: Quote,
    to: Optional[str] = None,
    subject: Optional[str] = None,
    message: Optional[str] = None,
) -> EmailPayload:
    """Prépare l'email ; destinataire par défaut : l'email du client."""
    recipient = (to if to is not None else quote.client.email or "").strip()
    if not recipient:
        raise ShareError("L'adresse email est requise")
    if not _EMAIL_RE.match(recipient):
        raise ShareError("Format d'email invalide")
    return EmailPayload(
        to=recipient,
        subject=subject or f"Devis {quote.number}",
        message=message or default_email_message(quote.number),
    )


# ─── LIENS ──────────────────────────────────────────────────────

def mailto_link(payload: EmailPayload) -> str:
    query = urllib.parse.urlencode(
        {"subject": payload.subject, "body": payload.message},
        quote_via=urllib.parse.quote,
    )
    return f"mailto:{urllib.parse.quote(payload.to, safe='@')}?{query}"


def normalize_phone(tel: Optional[str]) -> str:
    """Chiffres seuls ; un numéro français 0X... devient 33X..."""
    t = "".join(filter(str.isdigit, tel or ""))
    if t.startswith("00"):
        t = t[2:]
    elif t.startswith("0"):
        t = "33" + t[1:]
    return t


def whatsapp_link(quote: Quote, phone: Optional[str] = None, message: Optional[str] = None) -> str:
    """Lien wa.me pré-rempli. Sans numéro, WhatsApp laisse choisir le contact."""
    t = normalize_phone(phone)
    text = message or default_whatsapp_message(quote.number)
    return f"https://wa.me/{t}?text={urllib.parse.quote(text)}"


# ─── ENVOI ──────────────────────────────────────────────────────

def _send_resend(payload: EmailPayload, pdf: Optional[Tuple[bytes, str]] = None) -> Tuple[bool, str]:
    """Envoie via l'API HTTP Resend."""
    body = {
        "from": f"{SMTP_NAME} <{SMTP_FROM}>",
        "to": [payload.to],
        "subject": payload.subject,
        "text": payload.message,
    }
    if pdf:
        pdf_bytes, filename = pdf
        body["attachments"] = [{"filename": filename, "content": base64.b64encode(pdf_bytes).decode()}]

    try:
        with httpx.Client(timeout=15) as client:
            resp = client.post(
                "https://api.resend.com/emails",
                headers={"Authorization": f"Bearer {RESEND_API_KEY}"},
                json=body,
            )
    except httpx.HTTPError as e:
        return False, f"Erreur Resend: {e}"

    if resp.status_code in (200, 201):
        return True, "Email envoyé avec succès"
    return False, f"Resend erreur {resp.status_code}: {resp.text}"


def _send_smtp(payload: EmailPayload, pdf: Optional[Tuple[bytes, str]] = None) -> Tuple[bool, str]:
    """Envoie via SMTP (STARTTLS)."""
    if not SMTP_HOST or not SMTP_USER or not SMTP_PASSWORD:
        return False, "Configuration SMTP incomplète"

    msg = MIMEMultipart()
    msg["From"] = formataddr((str(Header(SMTP_NAME, "utf-8")), SMTP_FROM))
    msg["To"] = payload.to
    msg["Subject"] = Header(payload.subject, "utf-8")
    msg.attach(MIMEText(payload.message, "plain", "utf-8"))
    if pdf:
        pdf_bytes, filename = pdf
        part = MIMEApplication(pdf_bytes, _subtype="pdf")
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    try:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=10)
        try:
            server.starttls()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.sendmail(SMTP_FROM, payload.to, msg.as_bytes())
        finally:
            server.quit()
    except smtplib.SMTPException as e:
        return False, f"Erreur SMTP: {e}"
    except OSError as e:
        return False, f"Connexion SMTP impossible: {e}"
    return True, "Email envoyé (SMTP)"


def send_email(payload: EmailPayload, pdf: Optional[Tuple[bytes, str]] = None) -> Tuple[bool, str]:
    """Resend si une clé est configurée, SMTP sinon. Retourne (ok, message)."""
    if RESEND_API_KEY:
        ok, msg = _send_resend(payload, pdf)
    else:
        ok, msg = _send_smtp(payload, pdf)
    if ok:
        logger.info("Devis envoyé à %s (%s)", payload.to, payload.subject)
    else:
        logger.error("Envoi email à %s échoué : %s", payload.to, msg)
    return ok, msg
