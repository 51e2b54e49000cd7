"""
Moteur de rendu des devis — un seul gabarit HTML, paramétré par les jetons de style.
Sert l'aperçu écran, l'impression navigateur et la source HTML du PDF (xhtml2pdf).
"""

from html import escape
from typing import Dict, Optional

from solvix.services.styles import TemplateStyle
from solvix.services.totals import QuoteView

MODES = ("screen", "print", "pdf")

BRANDING_LINE = "Solvix - Génération de devis professionnels"


def _e(value) -> str:
    return escape("" if value is None else str(value))


def _multiline(value) -> str:
    """Échappe puis conserve les retours à la ligne."""
    return "<br>".join(_e(part) for part in str(value or "").strip().splitlines())


def _heading(style: TemplateStyle, text: str) -> str:
    return text.upper() if style.uppercase_headings else text


# ═══════════════════════════════════════════════════════════════
# CSS
# ═══════════════════════════════════════════════════════════════

def _css_base(s: TemplateStyle, mode: str) -> str:
    font = s.pdf_font if mode == "pdf" else s.font_family
    if s.gradient and mode != "pdf":
        band_bg = f"background: linear-gradient(135deg, {s.primary} 0%, {s.accent} 100%);"
    else:
        band_bg = f"background-color: {s.primary};"

    css = f"""
body {{
    font-family: {font};
    font-size: 10pt;
    color: {s.text};
    line-height: 1.4;
    margin: 0;
    padding: 0;
}}
table {{ width: 100%; border-collapse: collapse; }}
td, th {{ vertical-align: top; }}
.header {{ margin-bottom: 18px; }}
.header td {{ padding: 12px 14px; }}
.company-name {{ font-size: 16pt; font-weight: bold; margin-bottom: 4px; }}
.company-info {{ font-size: 8.5pt; line-height: 1.5; }}
.doc-title {{ font-size: 22pt; font-weight: bold; letter-spacing: 3px; }}
.doc-number {{ font-size: 11pt; font-weight: bold; margin: 4px 0 6px 0; }}
.doc-dates {{ font-size: 8.5pt; }}
.header-doc {{ text-align: right; width: 45%; }}
.section-title {{
    font-size: 10pt;
    font-weight: bold;
    color: {s.primary};
    margin: 14px 0 6px 0;
}}
.client {{
    background-color: {s.surface};
    border-left: 4px solid {s.primary};
    padding: 10px 14px;
    margin-bottom: 16px;
}}
.client-name {{ font-size: 11pt; font-weight: bold; }}
.client-company {{ color: {s.primary}; }}
.client-line {{ font-size: 9pt; color: {s.muted}; }}
.items th {{
    background-color: {s.primary};
    color: #ffffff;
    font-size: 8.5pt;
    font-weight: bold;
    padding: 7px 8px;
    text-align: left;
}}
.items td {{
    padding: 7px 8px;
    font-size: 9pt;
    border-bottom: 1px solid {s.border};
}}
.items tr.alt td {{ background-color: {s.zebra}; }}
.items .num, .totals .num {{ text-align: right; }}
.items .center {{ text-align: center; }}
.items td.line-total {{ font-weight: bold; color: {s.primary}; }}
.totals-wrap {{ margin-top: 12px; }}
.totals td {{ padding: 5px 10px; font-size: 9.5pt; }}
.totals td.label {{ color: {s.muted}; }}
.totals td.value {{ text-align: right; font-weight: bold; }}
.totals tr.breakdown td {{ font-size: 8pt; color: {s.muted}; font-weight: normal; }}
.totals tr.grand td {{
    background-color: {s.primary};
    color: #ffffff;
    font-size: 12pt;
    font-weight: bold;
    padding: 9px 10px;
}}
.notes {{
    background-color: {s.surface};
    border: 1px solid {s.border};
    padding: 10px 14px;
    margin-top: 18px;
    font-size: 8.5pt;
    color: {s.muted};
}}
.notes .section-title {{ margin-top: 0; }}
.signature {{ text-align: right; margin-top: 22px; font-size: 9pt; color: {s.muted}; font-style: italic; }}
.footer {{
    border-top: 1px solid {s.border};
    margin-top: 22px;
    padding-top: 8px;
    font-size: 7.5pt;
    color: {s.muted};
    text-align: center;
}}
"""

    if s.header == "band":
        css += f"""
.header-band td {{ {band_bg} color: #ffffff; }}
.header-band .company-info, .header-band .doc-dates {{ color: #ffffff; }}
"""
    elif s.header == "underline":
        css += f"""
.header-underline {{ border-bottom: 2px solid {s.primary}; }}
.header-underline .company-name, .header-underline .doc-title {{ color: {s.primary}; }}
.header-underline .company-info, .header-underline .doc-dates {{ color: {s.muted}; }}
"""
    elif s.header == "centered":
        css += f"""
.header-centered td {{ text-align: center; border-bottom: 1px solid {s.accent}; }}
.header-centered .company-name {{ color: {s.primary}; font-weight: normal; letter-spacing: 2px; }}
.header-centered .doc-title {{ color: {s.primary}; font-weight: normal; letter-spacing: 8px; margin-top: 10px; }}
.header-centered .company-info, .header-centered .doc-dates {{ color: {s.muted}; }}
"""
    elif s.header == "split":
        css += f"""
.header-split td.header-company {{ background-color: {s.primary}; color: #ffffff; border: 2px solid {s.border}; }}
.header-split td.header-company .company-info {{ color: #ffffff; }}
.header-split td.header-doc {{ background-color: {s.surface}; border: 2px solid {s.border}; }}
.header-split .doc-title {{ color: {s.primary}; }}
.header-split .doc-number {{ color: {s.accent}; }}
"""
    return css


def _css_page(s: TemplateStyle, mode: str) -> str:
    if mode == "pdf":
        return """
@page {
    size: a4 portrait;
    margin: 1.4cm 1.4cm 2.2cm 1.4cm;
    @frame footer_frame {
        -pdf-frame-content: pageFooter;
        left: 1.4cm;
        width: 18.2cm;
        bottom: 0.8cm;
        height: 1cm;
    }
}
#pageFooter { font-size: 7pt; color: #94a3b8; text-align: center; }
"""
    css = f"""
@page {{ size: A4; margin: 12mm; }}
.items tr, .client, .totals-wrap, .notes, .signature {{ page-break-inside: avoid; }}
.client, .notes, .totals-wrap table {{ border-radius: {s.radius}px; }}
@media print {{
    body * {{ -webkit-print-color-adjust: exact !important; print-color-adjust: exact !important; }}
    .no-print {{ display: none !important; }}
    .sheet {{ box-shadow: none !important; margin: 0 !important; width: auto !important; min-height: 0 !important; padding: 0 !important; }}
    html, body {{ background: #ffffff !important; }}
}}
"""
    if mode == "screen":
        css += f"""
html, body {{ background: #e5e7eb; }}
.sheet {{
    background: #ffffff;
    width: 210mm;
    min-height: 297mm;
    margin: 20px auto;
    padding: 15mm;
    box-sizing: border-box;
    box-shadow: 0 4px 16px rgba(0, 0, 0, 0.12);
}}
.toolbar {{ text-align: center; padding: 14px 0 0 0; }}
.toolbar a, .toolbar button {{
    display: inline-block;
    margin: 0 4px;
    padding: 8px 16px;
    border: none;
    border-radius: 6px;
    background: {s.primary};
    color: #ffffff;
    font-size: 10pt;
    text-decoration: none;
    cursor: pointer;
}}
"""
    return css


def render_css(style: TemplateStyle, mode: str) -> str:
    return _css_base(style, mode) + _css_page(style, mode)


# ═══════════════════════════════════════════════════════════════
# BLOCS
# ═══════════════════════════════════════════════════════════════

def _logo(view: QuoteView) -> str:
    if not view.company.logo:
        return ""
    return f'<img src="{_e(view.company.logo)}" alt="Logo" class="logo" style="height:45px" /><br>'


def _company_contact(view: QuoteView) -> str:
    c = view.company
    contact = " | ".join(part for part in (_e(c.phone), _e(c.email)) if part)
    rows = [_multiline(c.address), contact]
    return "<br>".join(r for r in rows if r)


def _doc_block(view: QuoteView) -> str:
    dates = []
    if view.date_creation:
        dates.append(f"Date : <b>{_e(view.date_creation)}</b>")
    if view.date_expiration:
        dates.append(f"Valide jusqu'au : <b>{_e(view.date_expiration)}</b>")
    return f"""<div class="doc-title">DEVIS</div>
    <div class="doc-number">N° {_e(view.number)}</div>
    <div class="doc-dates">{"<br>".join(dates)}</div>"""


def _header(view: QuoteView, s: TemplateStyle) -> str:
    company = f"""{_logo(view)}<div class="company-name">{_e(view.company.name)}</div>
    <div class="company-info">{_company_contact(view)}</div>"""

    if s.header == "centered":
        return f"""<table class="header header-centered"><tr><td>
    {company}
    {_doc_block(view)}
</td></tr></table>"""

    return f"""<table class="header header-{s.header}"><tr>
<td class="header-company">
    {company}
</td>
<td class="header-doc">
    {_doc_block(view)}
</td>
</tr></table>"""


def _client_block(view: QuoteView, s: TemplateStyle) -> str:
    c = view.client
    rows = [f'<div class="client-name">{_e(c.name)}</div>']
    if c.company:
        rows.append(f'<div class="client-company">{_e(c.company)}</div>')
    if c.address:
        rows.append(f'<div class="client-line">{_multiline(c.address)}</div>')
    contact = " | ".join(part for part in (_e(c.phone), _e(c.email)) if part)
    if contact:
        rows.append(f'<div class="client-line">{contact}</div>')
    return f"""<div class="client">
    <div class="section-title">{_e(_heading(s, s.client_title))} :</div>
    {"".join(rows)}
</div>"""


def _items_table(view: QuoteView, s: TemplateStyle) -> str:
    rows = ""
    for i, line in enumerate(view.lines):
        alt = ' class="alt"' if i % 2 == 1 else ""
        rows += f"""<tr{alt}>
    <td>{_multiline(line.designation)}</td>
    <td class="center">{_e(line.quantity)}</td>
    <td class="num">{_e(line.unit_price)}</td>
    <td class="center">{_e(line.vat_rate)}</td>
    <td class="num line-total">{_e(line.total_ht)}</td>
</tr>
"""
    if not view.lines:
        rows = f'<tr><td colspan="5" class="center" style="color:{s.muted};padding:18px">Aucune prestation</td></tr>'

    return f"""<div class="section-title">{_e(_heading(s, s.items_title))} :</div>
<table class="items" repeat="1">
<thead>
<tr>
    <th style="width:45%">{_e(_heading(s, "Description"))}</th>
    <th class="center" style="width:10%">{_e(_heading(s, "Qté"))}</th>
    <th class="num" style="width:17%">{_e(_heading(s, "Prix unit."))}</th>
    <th class="center" style="width:10%">{_e(_heading(s, "TVA %"))}</th>
    <th class="num" style="width:18%">{_e(_heading(s, "Total HT"))}</th>
</tr>
</thead>
<tbody>
{rows}</tbody>
</table>"""


def _totals_block(view: QuoteView, s: TemplateStyle) -> str:
    rows = f"""<tr><td class="label">{_e(_heading(s, "Sous-total HT"))} :</td><td class="value">{_e(view.subtotal_ht)}</td></tr>"""
    if len(view.vat_breakdown) > 1:
        for b in view.vat_breakdown:
            rows += (
                f'<tr class="breakdown"><td class="label">TVA {_e(b.rate)} sur {_e(b.base)}</td>'
                f'<td class="value">{_e(b.amount)}</td></tr>'
            )
    rows += f"""<tr><td class="label">{_e(_heading(s, "Total TVA"))} :</td><td class="value">{_e(view.total_vat)}</td></tr>
<tr class="grand"><td class="label">TOTAL TTC :</td><td class="value">{_e(view.total_ttc)}</td></tr>"""

    return f"""<table class="totals-wrap"><tr>
<td style="width:55%"></td>
<td style="width:45%">
<table class="totals">
{rows}
</table>
</td>
</tr></table>"""


def _notes_block(view: QuoteView, s: TemplateStyle) -> str:
    if not view.notes.strip():
        return ""
    return f"""<div class="notes">
    <div class="section-title">{_e(_heading(s, s.notes_title))} :</div>
    {_multiline(view.notes)}
</div>"""


def _signature_block(view: QuoteView) -> str:
    img = ""
    if view.company.signature:
        img = f'<br><img src="{_e(view.company.signature)}" alt="Signature" class="signature-img" style="height:40px" />'
    return f"""<div class="signature">
    Fait le {_e(view.date_generated)}, {_e(view.company.name)}{img}
</div>"""


def _footer(view: QuoteView, branding: bool) -> str:
    legal = []
    if view.company.rccm:
        legal.append(f"RCCM : {_e(view.company.rccm)}")
    if view.company.ncc:
        legal.append(f"NCC : {_e(view.company.ncc)}")
    lines = []
    if legal:
        lines.append(f"<b>{_e(view.company.name)}</b> &nbsp;|&nbsp; " + " &nbsp;|&nbsp; ".join(legal))
    if branding:
        lines.append(f"Devis généré le {_e(view.date_generated)}")
        lines.append(BRANDING_LINE)
    if not lines:
        return ""
    return f'<div class="footer">{"<br>".join(lines)}</div>'


def _toolbar(actions: Dict[str, str]) -> str:
    buttons = ['<button type="button" onclick="window.print()">Imprimer</button>']
    labels = {"pdf": "Télécharger le PDF", "mailto": "Envoyer par email", "whatsapp": "Partager sur WhatsApp"}
    for key, label in labels.items():
        url = actions.get(key)
        if url:
            buttons.append(f'<a href="{_e(url)}" target="_blank" rel="noopener">{label}</a>')
    return f'<div class="toolbar no-print">{"".join(buttons)}</div>'


# ═══════════════════════════════════════════════════════════════
# DOCUMENT
# ═══════════════════════════════════════════════════════════════

def render_document(
    view: QuoteView,
    style: TemplateStyle,
    mode: str = "screen",
    branding: bool = True,
    actions: Optional[Dict[str, str]] = None,
) -> str:
    """Génère le document HTML complet d'un devis pour un modèle et un mode de sortie."""
    if mode not in MODES:
        raise ValueError(f"Mode de rendu inconnu : {mode!r}")

    content = "\n".join(part for part in (
        _header(view, style),
        _client_block(view, style),
        _items_table(view, style),
        _totals_block(view, style),
        _notes_block(view, style),
        _signature_block(view),
        _footer(view, branding),
    ) if part)

    toolbar = _toolbar(actions or {}) if mode == "screen" else ""
    page_footer = ""
    if mode == "pdf":
        page_footer = (
            f'<div id="pageFooter">Devis {_e(view.number)} &nbsp;-&nbsp; '
            f'page <pdf:pagenumber> / <pdf:pagecount></div>'
        )

    return f"""<!DOCTYPE html>
<html lang="fr"><head>
<meta charset="utf-8">
<title>Devis {_e(view.number)}</title>
<style>{render_css(style, mode)}</style>
</head><body class="devis devis-{style.id} mode-{mode}">
{toolbar}
{page_footer}
<div class="sheet">
{content}
</div>
</body></html>"""
