"""
Modèles visuels de devis — chaque modèle n'est qu'un jeu de jetons de style
consommé par le moteur de rendu unique.
"""

import logging
from typing import Dict, List, Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "classic"


class UnknownTemplateError(ValueError):
    """Identifiant de modèle non reconnu."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Modèle de devis inconnu : {identifier!r}")


class TemplateStyle(BaseModel):
    id: str
    label: str
    font_family: str
    pdf_font: Literal["Helvetica", "Times-Roman"] = "Helvetica"
    primary: str
    accent: str
    text: str
    muted: str
    surface: str
    border: str
    zebra: str
    header: Literal["band", "underline", "centered", "split"]
    gradient: bool = False
    uppercase_headings: bool = False
    radius: int = 4
    client_title: str = "Facturé à"
    items_title: str = "Détail des prestations"
    notes_title: str = "Notes et conditions"


# ─── Catalogue ──────────────────────────────────────────────────

STYLES: Dict[str, TemplateStyle] = {s.id: s for s in [
    TemplateStyle(
        id="classic", label="Classique",
        font_family="Arial, sans-serif",
        primary="#2C5282", accent="#2C5282", text="#2D3748", muted="#4A5568",
        surface="#EBF4FF", border="#CBD5E0", zebra="#F7FAFC",
        header="underline", uppercase_headings=True, radius=5,
        client_title="Facturé à", items_title="Détail des prestations",
        notes_title="Conditions & notes",
    ),
    TemplateStyle(
        id="modern", label="Moderne",
        font_family="'Segoe UI', Roboto, sans-serif",
        primary="#3B82F6", accent="#2563EB", text="#1F2937", muted="#6B7280",
        surface="#EFF6FF", border="#E5E7EB", zebra="#F9FAFB",
        header="band", gradient=True, uppercase_headings=True, radius=8,
        client_title="Client", items_title="Prestations",
        notes_title="Notes et conditions",
    ),
    TemplateStyle(
        id="minimal", label="Minimaliste",
        font_family="'Helvetica Neue', Helvetica, Arial, sans-serif",
        primary="#333333", accent="#333333", text="#333333", muted="#777777",
        surface="#F9F9F9", border="#E5E5E5", zebra="#FFFFFF",
        header="centered", radius=0,
        client_title="Client", items_title="Prestations", notes_title="Notes",
    ),
    TemplateStyle(
        id="creative", label="Créatif",
        font_family="Poppins, sans-serif",
        primary="#FF6B35", accent="#6F42C1", text="#2D3748", muted="#718096",
        surface="#F7FAFC", border="#E2E8F0", zebra="#F7FAFC",
        header="band", gradient=True, radius=10,
        client_title="Facturé à", items_title="Prestations créatives",
        notes_title="Notes et conditions",
    ),
    TemplateStyle(
        id="corporate", label="Corporate",
        font_family="Inter, sans-serif",
        primary="#1B4B8C", accent="#1B4B8C", text="#374151", muted="#6C757D",
        surface="#F8F9FA", border="#E9ECEF", zebra="#F8F9FA",
        header="band", radius=4,
        client_title="Facturé à", items_title="Détail des prestations",
        notes_title="Notes et conditions",
    ),
    TemplateStyle(
        id="artisan", label="Artisan",
        font_family="Georgia, serif", pdf_font="Times-Roman",
        primary="#8B4513", accent="#6B8E23", text="#3C2415", muted="#7A5C3E",
        surface="#F5F5DC", border="#D2B48C", zebra="#FEFCF8",
        header="split", radius=6,
        client_title="Facturé à", items_title="Détail des travaux artisanaux",
        notes_title="Conditions artisanales",
    ),
    TemplateStyle(
        id="elegant", label="Élégant",
        font_family="Garamond, serif", pdf_font="Times-Roman",
        primary="#8A6D3B", accent="#D4B78F", text="#333333", muted="#8A6D3B",
        surface="#F9F5ED", border="#E8E0D0", zebra="#FFFCF7",
        header="centered", radius=2,
        client_title="Facturé à", items_title="Détail des prestations",
        notes_title="Conditions & notes",
    ),
    TemplateStyle(
        id="professional", label="Professionnel",
        font_family="Helvetica, Arial, sans-serif",
        primary="#2C3E50", accent="#3498DB", text="#2C3E50", muted="#7F8C8D",
        surface="#F8F9FA", border="#E9ECEF", zebra="#F8F9FA",
        header="underline", uppercase_headings=True, radius=4,
        client_title="Facturé à", items_title="Détail des prestations",
        notes_title="Conditions & notes",
    ),
]}

# Identifiants historiques (français) encore présents dans les devis stockés
ALIASES: Dict[str, str] = {
    "classique": "classic",
    "moderne": "modern",
    "minimaliste": "minimal",
    "creatif": "creative",
    "créatif": "creative",
    "professionnel": "professional",
    "élégant": "elegant",
}


def template_ids() -> List[str]:
    return list(STYLES)


def aliases_for(template_id: str) -> List[str]:
    return sorted(a for a, target in ALIASES.items() if target == template_id and a != template_id)


def get_style(identifier: str) -> TemplateStyle:
    """Retourne le style d'un modèle. Lève UnknownTemplateError si inconnu."""
    key = (identifier or "").strip().lower()
    key = ALIASES.get(key, key)
    style = STYLES.get(key)
    if style is None:
        raise UnknownTemplateError(identifier)
    return style


def resolve_template(identifier: str) -> TemplateStyle:
    """Variante tolérante pour les devis stockés : repli sur le modèle classique."""
    try:
        return get_style(identifier)
    except UnknownTemplateError:
        logger.warning("Modèle %r inconnu, repli sur %r", identifier, DEFAULT_TEMPLATE)
        return STYLES[DEFAULT_TEMPLATE]
