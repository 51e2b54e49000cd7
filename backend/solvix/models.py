"""
Schemas Pydantic du devis.
Compatible avec le schéma PostgreSQL (tables devis, articles_devis, clients, profiles).
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# DEVIS
# ============================================================
QuoteStatus = Literal["Brouillon", "Envoyé", "En attente", "Accepté", "Refusé"]


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str = ""
    designation: str = ""
    quantity: float = 1
    unit_price: float = 0
    vat_rate: float = 0  # pourcentage


class ClientInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    company: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""


class CompanyInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo: Optional[str] = None
    signature: Optional[str] = None
    rccm: Optional[str] = None
    ncc: Optional[str] = None


class Quote(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: Optional[str] = None
    number: str
    date_creation: Optional[date] = None
    date_expiration: Optional[date] = None
    currency: str = "EUR"
    notes: str = ""
    template: str = "classic"
    status: QuoteStatus = "Brouillon"
    items: List[LineItem] = Field(default_factory=list)
    client: ClientInfo = Field(default_factory=ClientInfo)
    company: CompanyInfo = Field(default_factory=CompanyInfo)

    # Valeurs dénormalisées telles que stockées, jamais utilisées pour l'affichage
    subtotal_ht: Optional[float] = None
    total_vat: Optional[float] = None
    total_ttc: Optional[float] = None


# ============================================================
# API
# ============================================================
class TemplateOut(BaseModel):
    id: str
    label: str
    aliases: List[str] = []


class CurrencyOut(BaseModel):
    code: str
    name: str
    symbol: str
    position: str
    decimals: int
    example: str


class ShareEmailRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    attach_pdf: bool = True
    template: Optional[str] = None


class ShareLink(BaseModel):
    channel: Literal["whatsapp", "mailto"]
    url: str
