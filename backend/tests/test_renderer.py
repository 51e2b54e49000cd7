"""Tests for the single HTML renderer."""

from datetime import date

import pytest

from solvix.models import LineItem
from solvix.services.renderer import BRANDING_LINE, MODES, render_document
from solvix.services.styles import STYLES, get_style
from solvix.services.totals import build_view


@pytest.fixture
def view(sample_quote):
    return build_view(sample_quote, today=date(2025, 1, 20))


@pytest.mark.parametrize("mode", MODES)
@pytest.mark.parametrize("template_id", list(STYLES))
def test_every_template_renders_in_every_mode(view, template_id, mode):
    html = render_document(view, get_style(template_id), mode=mode)
    assert html.startswith("<!DOCTYPE html>")
    assert f"devis-{template_id}" in html
    assert "DEV-2025-001" in html
    assert "Aziz Tindé" in html
    assert "Développement site vitrine" in html


@pytest.mark.parametrize("mode", MODES)
def test_all_templates_show_the_same_totals(view, mode):
    """Totals are computed once: every template displays identical figures."""
    for style in STYLES.values():
        html = render_document(view, style, mode=mode)
        for amount in ("250,00 €", "45,00 €", "295,00 €", "200,00 €", "100,00 €", "50,00 €"):
            assert amount in html, f"{style.id}/{mode}: {amount} absent"


@pytest.mark.parametrize("mode", MODES)
def test_templates_render_distinct_documents(view, mode):
    outputs = {render_document(view, style, mode=mode) for style in STYLES.values()}
    assert len(outputs) == len(STYLES)


def test_unknown_mode(view):
    with pytest.raises(ValueError):
        render_document(view, get_style("classic"), mode="fax")


def test_user_text_is_escaped(sample_quote):
    evil = sample_quote.model_copy(update={
        "items": [LineItem(designation="<script>alert(1)</script>", quantity=1, unit_price=1, vat_rate=0)],
    })
    html = render_document(build_view(evil), get_style("modern"))
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_newlines_become_line_breaks(view):
    html = render_document(view, get_style("classic"))
    assert "456 Avenue de l&#x27;Innovation<br>69000 Lyon" in html
    assert "30% à la commande.<br>Solde à la livraison." in html


def test_notes_block_omitted_without_notes(sample_quote):
    html = render_document(build_view(sample_quote.model_copy(update={"notes": "  "})), get_style("classic"))
    assert 'class="notes"' not in html


def test_template_specific_headings(view):
    assert "DÉTAIL DES PRESTATIONS" in render_document(view, get_style("classic"))
    assert "Détail des travaux artisanaux" in render_document(view, get_style("artisan"))
    assert "Prestations créatives" in render_document(view, get_style("creative"))


def test_branding_footer_toggle(view):
    style = get_style("classic")
    assert BRANDING_LINE in render_document(view, style, branding=True)
    html = render_document(view, style, branding=False)
    assert BRANDING_LINE not in html
    # les mentions légales restent
    assert "RCCM-PA-2024-B-123" in html


def test_signature_line_and_image(sample_quote, png_data_uri):
    q = sample_quote.model_copy(update={
        "company": sample_quote.company.model_copy(update={"signature": png_data_uri, "logo": png_data_uri}),
    })
    html = render_document(build_view(q, today=date(2025, 1, 20)), get_style("elegant"))
    assert "Fait le 20/01/2025, Solvix" in html
    assert 'alt="Signature"' in html
    assert 'alt="Logo"' in html


def test_no_images_without_references(view):
    html = render_document(view, get_style("elegant"))
    assert "<img" not in html


def test_vat_breakdown_only_with_several_rates(sample_quote, view):
    assert "TVA 10% sur 50,00 €" in render_document(view, get_style("corporate"))
    single = sample_quote.model_copy(update={"items": sample_quote.items[:1]})
    assert 'class="breakdown"' not in render_document(build_view(single), get_style("corporate"))


def test_empty_quote_renders(sample_quote):
    html = render_document(build_view(sample_quote.model_copy(update={"items": []})), get_style("minimal"))
    assert "Aucune prestation" in html
    assert "0,00 €" in html


def test_screen_mode_has_toolbar_and_print_rules(view):
    html = render_document(
        view, get_style("modern"), mode="screen",
        actions={"pdf": "/api/devis/q-1/pdf?template=modern", "whatsapp": "https://wa.me/?text=x"},
    )
    assert "window.print()" in html
    assert "/api/devis/q-1/pdf?template=modern" in html
    assert "https://wa.me/?text=x" in html
    assert "Envoyer par email" not in html
    assert "@media print" in html
    assert "no-print" in html


def test_print_mode_has_no_toolbar(view):
    html = render_document(view, get_style("modern"), mode="print")
    assert "window.print()" not in html
    assert "page-break-inside: avoid" in html
    assert "print-color-adjust: exact" in html


def test_pdf_mode_is_xhtml2pdf_friendly(view):
    html = render_document(view, get_style("creative"), mode="pdf")
    assert "linear-gradient" not in html
    assert "rgba(" not in html
    assert "<pdf:pagenumber>" in html
    assert "-pdf-frame-content: pageFooter" in html
    assert 'repeat="1"' in html
    assert "font-family: Helvetica" in html


def test_gradient_kept_on_screen(view):
    assert "linear-gradient(135deg, #FF6B35 0%, #6F42C1 100%)" in render_document(view, get_style("creative"))


def test_serif_templates_use_times_in_pdf(view):
    assert "font-family: Times-Roman" in render_document(view, get_style("artisan"), mode="pdf")
